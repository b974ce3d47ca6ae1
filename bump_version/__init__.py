"""Bump the pubspec version, tagging the current version in git first."""
