"""Cross-cutting helpers: configuration and logging."""
