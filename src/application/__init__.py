"""Application layer - Use cases and orchestration.

Structure:
- services/: Cache invalidation (tag fan-out and entity-driven invalidation)

The application layer orchestrates infrastructure through protocols and
contains no HTTP concerns.
"""
