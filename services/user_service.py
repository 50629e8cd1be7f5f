"""
services/user_service.py
-------------------------
Business logic for the users resource.
Sits between the HTTP handlers and the UserRepository.
"""

from typing import Optional

from models.user import User
from repositories.user_repo import UserRepository
from utils.logger import get_logger

logger = get_logger(__name__)


class UserService:
    """Lists users and adds new ones from form input."""

    def __init__(self, repo: UserRepository):
        self.repo = repo

    def list_users(self) -> list[User]:
        return self.repo.list_all()

    def add_user(self, name: Optional[str]) -> Optional[User]:
        """
        Add a user if a name was given.

        An empty or missing name is ignored: nothing is inserted and no
        error is raised.

        Returns:
            The saved User, or None when the name was empty.
        """
        if not name:
            logger.debug("Ignoring submission with an empty name.")
            return None
        return self.repo.add(name)
