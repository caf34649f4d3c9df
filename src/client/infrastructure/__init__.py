"""Cross-cutting infrastructure: configuration and logging."""
