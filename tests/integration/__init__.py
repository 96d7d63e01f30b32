"""Integration tests that spawn real child processes."""
