"""Core domain: models, sanitizer, log events and metrics aggregation."""
