"""Document store adapters, serialization, and the bulk writer."""
