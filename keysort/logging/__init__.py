"""Logging package with Rich-based session output."""

from .rich_logger import RichSessionReporter, QuietSessionReporter, setup_logging

__all__ = ["RichSessionReporter", "QuietSessionReporter", "setup_logging"]
