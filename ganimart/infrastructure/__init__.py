"""Infrastructure layer: durable storage and the legacy cart endpoint client."""
