"""AX order intake service."""
