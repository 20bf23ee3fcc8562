"""Data models for snapshots, deltas and revert operations."""
