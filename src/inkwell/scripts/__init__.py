"""Operational scripts: database creation and migrations."""
