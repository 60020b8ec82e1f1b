"""Authenticated clients for remote photo services."""
