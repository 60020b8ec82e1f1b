"""Errors and upload models shared by all components."""
