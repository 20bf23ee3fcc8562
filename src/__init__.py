"""oc-revert: snapshot and revert OpenShift cluster state."""

__version__ = "0.1.0"
