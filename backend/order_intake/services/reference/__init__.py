"""Read-only reference data resolution."""
