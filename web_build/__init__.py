"""Build web projects and copy their output into Flutter assets."""
