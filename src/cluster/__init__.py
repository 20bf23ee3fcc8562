"""Cluster access through the oc command-line client.

Classes:
    OcClient: Subprocess wrapper exposing list/get/delete/apply/patch/wait primitives
"""

from __future__ import annotations

__all__ = [
    "OcClient",
    "OcCommandError",
    "OcNotFoundError",
    "ToolNotFoundError",
]

from .client import OcClient, OcCommandError, OcNotFoundError, ToolNotFoundError
