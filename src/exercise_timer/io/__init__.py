"""Library persistence and JSON serialization."""
