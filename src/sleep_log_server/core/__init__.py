"""Core configuration, database and security plumbing."""
