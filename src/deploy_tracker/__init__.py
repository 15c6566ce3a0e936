"""Per-channel deploy tracking exposed over MCP with a plain-text history dashboard."""

__version__ = "0.1.0"

__all__ = ["__version__"]
