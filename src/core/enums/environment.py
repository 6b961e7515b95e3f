"""Application environment types.

Used by Settings to select environment-specific behavior:
- DEVELOPMENT: human-readable logs, insecure session cookie allowed
- TESTING / CI: JSON logs for machine parsing
- PRODUCTION: Secure session cookie
"""

from enum import Enum


class Environment(str, Enum):
    """Application environment types."""

    DEVELOPMENT = "development"
    TESTING = "testing"
    CI = "ci"
    PRODUCTION = "production"
