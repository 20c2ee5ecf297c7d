"""diffcommit — versioned writing projects with word-level diff/merge."""
