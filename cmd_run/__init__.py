"""Command runner with working-directory control and tee-to-log output."""
