"""Pydantic schemas for safety, discovery and connection data."""
