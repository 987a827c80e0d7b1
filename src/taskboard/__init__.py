"""Multi-user task board with live updates over websockets."""

__all__ = ["__version__"]

__version__ = "0.1.0"
