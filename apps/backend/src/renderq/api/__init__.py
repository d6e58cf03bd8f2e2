"""HTTP API for renderq."""
