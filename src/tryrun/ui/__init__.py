"""Command-line surface for tryrun."""
