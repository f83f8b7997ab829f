"""Infrastructure layer - settings, logging, latency, identifiers and HTTP client."""
