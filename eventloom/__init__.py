"""Event queue with listener filters, listener removal helpers, ordered queue lists and an active-object demo."""

__version__ = "0.2.0"