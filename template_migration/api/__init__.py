"""HTTP API for the template migration service."""
