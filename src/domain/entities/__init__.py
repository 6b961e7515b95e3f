"""Domain entities."""

from src.domain.entities.session import Session

__all__ = ["Session"]
