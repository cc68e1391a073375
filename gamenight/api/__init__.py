"""HTTP API for Gamenight."""
