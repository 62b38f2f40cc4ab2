"""HTTP API for the competition engine."""
