"""Session core: parsing, storage and aggregation."""
