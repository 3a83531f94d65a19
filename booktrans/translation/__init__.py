"""Batching, translation backends, reassembly and corrections."""
