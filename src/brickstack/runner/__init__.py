"""Snapshot runner, run configuration and dataset generation."""
