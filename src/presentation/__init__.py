"""Presentation layer - HTTP concerns.

Structure:
- routers/system.py: non-versioned endpoints (/, /health)
- routers/api/v1/: versioned API resources
- routers/api/middleware/: request guard, tracing, session dependencies

Contains no business logic: routes delegate to container-provided services.
"""
