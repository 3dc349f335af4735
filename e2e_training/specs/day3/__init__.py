"""Day 3: API testing, environments, files, iframes, network mocking."""
