"""Read-only catalog lookups backing the order entry form."""
