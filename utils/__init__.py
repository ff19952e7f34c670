"""CLI helpers: output formatting and prompt input validation."""
