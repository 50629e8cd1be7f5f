"""
handlers/users_api_handler.py
------------------------------
JSON mirror of the home page list.
"""

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from db.errors import QueryError
from handlers.dependencies import get_user_service
from services.user_service import UserService

router = APIRouter(prefix="/api")


@router.get("/users")
def list_users(service: UserService = Depends(get_user_service)) -> Response:
    """
    Return `{"users": [{"id": ..., "name": ...}, ...]}`.

    An empty table gives `{"users": []}`. On a database failure the
    error text is sent back as the body with a 500.
    """
    try:
        users = service.list_users()
    except QueryError as e:
        return PlainTextResponse(str(e), status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
    return JSONResponse({"users": [u.to_dict() for u in users]})
