"""HTTP API for the thermogram pipeline."""
