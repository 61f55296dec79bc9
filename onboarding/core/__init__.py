"""Core configuration, security and workflow logic."""
