"""Generate Flutter platform directories (android, windows) from an app config."""
