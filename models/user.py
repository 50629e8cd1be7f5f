"""
models/user.py
--------------
Domain model for the users listed on the home page and the JSON API.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class User:
    """
    Represents a single user row.

    Attributes:
        name: Display name submitted through the form. Not unique.
        id: Database primary key (None for new records). Never changes once set.
    """
    name: str
    id: Optional[int] = None

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name}

    def __str__(self) -> str:
        return f"{self.id} - {self.name}"
