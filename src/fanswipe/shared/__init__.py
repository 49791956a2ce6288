"""Helpers shared across services."""
