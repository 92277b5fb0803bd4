"""structlit — census of keyed struct literal initialization in Go code."""

__version__ = "0.1.0"
