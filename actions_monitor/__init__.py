"""GitHub Actions monitor service."""
