"""Core models, protocols and configuration."""
