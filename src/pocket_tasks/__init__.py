"""pocket-tasks: a local to-do list built around a small reducer-style task store."""

__version__ = "0.1.0"
