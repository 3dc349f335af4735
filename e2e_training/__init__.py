"""End-to-end training suites and the helpers they share."""

__version__ = "1.0.0"
