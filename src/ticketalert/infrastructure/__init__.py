"""Infrastructure layer: HTTP integrations, persistence, email, observability."""
