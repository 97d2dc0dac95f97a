"""Discord gateway trigger adapter for workflow engines."""

__version__ = "0.1.0"
