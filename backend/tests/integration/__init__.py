"""
Integration tests package.

Tests that run the services, repositories and Flask app against an
in-memory SQLite database.
"""
