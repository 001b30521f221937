"""Parse, load and install disk-space cleanup modules, with helpers for terminal display."""

__version__ = "0.0.2"