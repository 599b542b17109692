"""Persistence: ORM models and async sessions."""
