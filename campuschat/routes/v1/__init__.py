# campuschat/routes/v1/__init__.py
"""Versioned API routes mounted under /api/v1."""
