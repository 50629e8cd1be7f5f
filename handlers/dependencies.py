"""
handlers/dependencies.py
-------------------------
FastAPI dependency providers. The Database lives on `app.state`
(set by `main.create_app`) and is passed down to every handler from there.
"""

from fastapi import Depends, Request

from db.connection import Database
from repositories.user_repo import UserRepository
from services.user_service import UserService


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_user_repo(database: Database = Depends(get_database)) -> UserRepository:
    return UserRepository(database)


def get_user_service(repo: UserRepository = Depends(get_user_repo)) -> UserService:
    return UserService(repo)
