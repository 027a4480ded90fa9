"""HTTP API for the agent chat service."""
