"""Threaded post comments persisted in a flat object store."""

__version__ = "0.1.0"
