"""Domain entities and persistence contracts."""
