"""
Unit tests package.

Isolated tests for rules, services and helpers; repositories are mocked.
"""
