"""Snapshot comparison."""
