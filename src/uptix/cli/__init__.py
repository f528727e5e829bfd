"""uptix command-line interface."""
