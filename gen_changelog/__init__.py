"""Generate release notes from git history, written by the Anthropic Messages API."""
