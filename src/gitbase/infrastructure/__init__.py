"""Infrastructure layer: remote clients, persistence and credentials."""
