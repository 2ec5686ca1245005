"""Pydantic models for API responses and template contexts."""
