"""Local upload cache: fingerprints and SQLite store."""
