"""Integration tests for the command line interface."""

from pathlib import Path

import pytest
from typer.testing import CliRunner

from cli.commands.main import app
from tests.fixtures.epub_generator import EpubGenerator

runner = CliRunner()


@pytest.fixture(autouse=True)
def no_pacing(monkeypatch):
    monkeypatch.setenv("BOOKTRANS_BACKOFF_BASE", "0")
    monkeypatch.delenv("BOOKTRANS_WORKERS", raising=False)


def test_translate_command(tmp_path):
    book = EpubGenerator().create_book([("One", "<p>Hello world</p>")], tmp_path / "book.epub")
    output = tmp_path / "out.epub"

    result = runner.invoke(app, ["translate", str(book), "-o", str(output), "-b", "local"])

    assert result.exit_code == 0, result.output
    assert output.exists()
    assert "Success" in result.output


def test_translate_default_output_name(tmp_path):
    book = EpubGenerator().create_book([("One", "<p>Bye</p>")], tmp_path / "book.epub")

    result = runner.invoke(app, ["translate", str(book), "-b", "local", "-t", "ru"])

    assert result.exit_code == 0, result.output
    assert (tmp_path / "book_ru.epub").exists()


def test_missing_input_fails(tmp_path):
    result = runner.invoke(app, ["translate", str(tmp_path / "missing.epub"), "-b", "local"])
    assert result.exit_code == 1


def test_refuses_to_overwrite_input(tmp_path):
    book = EpubGenerator().create_book([("One", "<p>Hi</p>")], tmp_path / "book.epub")

    result = runner.invoke(app, ["translate", str(book), "-o", str(book), "-b", "local"])

    assert result.exit_code == 1


def test_unknown_backend_fails(tmp_path):
    book = EpubGenerator().create_book([("One", "<p>Hi</p>")], tmp_path / "book.epub")

    result = runner.invoke(app, ["translate", str(book), "-b", "nope"])

    assert result.exit_code == 1


def test_backends_command():
    result = runner.invoke(app, ["backends"])

    assert result.exit_code == 0
    for name in ("free", "google", "local"):
        assert name in result.output


def test_test_command_local():
    result = runner.invoke(app, ["test", "-b", "local", "--sample", "Hello"])

    assert result.exit_code == 0
    assert "Привет" in result.output


def test_translate_with_bundled_corrections(tmp_path):
    book = EpubGenerator().create_book([("One", "<p>Hello world</p>")], tmp_path / "book.epub")
    corrections = Path(__file__).parent.parent.parent / "configs" / "corrections_ru.yaml"
    output = tmp_path / "out.epub"

    result = runner.invoke(app, [
        "translate", str(book), "-o", str(output), "-b", "local", "--corrections", str(corrections)
    ])

    assert result.exit_code == 0, result.output
    assert output.exists()
