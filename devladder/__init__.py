"""devladder: stage ladders, readiness gates and episode metrics for production projects."""

__version__ = "0.1.0"
