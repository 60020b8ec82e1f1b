"""Content-addressed duplicate detection: local cache plus remote search."""
