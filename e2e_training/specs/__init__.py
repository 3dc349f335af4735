"""Training suites, one package per course day."""
