"""Baseline capture and storage."""
