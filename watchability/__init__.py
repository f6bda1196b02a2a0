"""College basketball watchability ranking and team reconciliation."""

__version__ = "0.1.0"
