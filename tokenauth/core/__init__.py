"""Cross-cutting application plumbing: config, extensions, errors, logging."""
