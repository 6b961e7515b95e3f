"""Domain layer - pure Python, no framework or infrastructure imports.

Structure:
- entities/: Session entity
- value_objects/: Rate limit policy and decision
- protocols/: Ports for the key-value adapter, rate limiter and logger
- enums/: Store backend and cache status
"""
