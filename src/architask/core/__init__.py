"""Core data models, configuration and shared utilities."""
