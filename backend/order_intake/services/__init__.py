"""Service layer: allocation, reference resolution, order writes and catalog lookups."""
