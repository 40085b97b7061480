"""Domain entities for GitBase."""

from gitbase.domain.entities.session import Session

__all__ = ["Session"]
