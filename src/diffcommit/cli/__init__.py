"""diffcommit command-line interface."""
