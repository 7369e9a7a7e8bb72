"""Credential store abstraction layer."""

from __future__ import annotations

from abc import ABC, abstractmethod

from models.user import User


class AbstractUserStore(ABC):
    """Interface for credential store backends."""

    @abstractmethod
    def find_by_email(self, email: str) -> User | None:
        """Return the user with the given normalized email, if any."""

    @abstractmethod
    def insert(self, fullname: str, email: str, password: str, role: str = "user") -> User:
        """Hash ``password``, persist a new user and return it.

        Raises ``ConflictError`` when the email is already taken.
        """

    @abstractmethod
    def mark_verified(self, email: str) -> bool:
        """Flag the user as verified; return False when no such user exists."""

    @abstractmethod
    def ensure_admin(
        self, fullname: str, email: str, password: str, *, reset: bool = False
    ) -> tuple[User, str]:
        """Create the admin account if missing and report the action taken."""
