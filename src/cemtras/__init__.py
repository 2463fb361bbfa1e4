"""CemtrAS AI: a role-aware cement plant assistant API."""
