"""Reachability monitor: scheduled and ad hoc HTTP reachability checks."""

__version__ = "0.1.0"
