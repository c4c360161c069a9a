"""Visual regression testing: capture, compare and report screenshots of two sites."""

__version__ = "0.2.0"
