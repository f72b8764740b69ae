"""Core session management."""
