"""Request-independent redirect logic."""
