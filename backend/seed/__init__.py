"""Sample data for local development."""
