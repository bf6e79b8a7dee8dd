"""Review explorer: filter, search and summarize product reviews."""

__version__ = "1.0.0"
