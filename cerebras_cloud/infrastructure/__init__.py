"""Infrastructure layer - configuration and the HTTP transport."""
