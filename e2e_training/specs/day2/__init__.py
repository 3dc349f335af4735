"""Day 2: actions, hooks, assertions, custom commands, waits."""
