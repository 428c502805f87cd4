"""
Backend package for the feedback collection service.

This package provides a FastAPI application for the public feedback form
and the admin dashboard, with key-value storage abstractions so the same
handlers run against Postgres, Redis or an in-memory store.
"""
