"""Application layer: services built on the collection store."""
