"""Infrastructure layer: HTTP transport and session storage backends."""
