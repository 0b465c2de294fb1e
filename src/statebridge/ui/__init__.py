"""Command-line surface for statebridge."""
