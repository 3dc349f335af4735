pytest_plugins = ["e2e_training.pytest_fixtures", "pytester"]
