"""Day 4: CI/CD patterns and the scalable login suite."""
