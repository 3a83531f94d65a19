"""Core models, scheduling and the job pipeline."""
