"""Order ingestion services."""
