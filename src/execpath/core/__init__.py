"""Core configuration, data models and exceptions."""
