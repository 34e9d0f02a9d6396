"""Infrastructure layer - resolver, registry, processor and logging."""
