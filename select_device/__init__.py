"""Resolve a Flutter device by index or ID."""
