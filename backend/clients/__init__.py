"""HTTP clients for hosted third-party APIs."""
