"""Core models, session generation and the session controller."""
