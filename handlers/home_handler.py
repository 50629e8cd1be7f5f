"""
handlers/home_handler.py
-------------------------
Serves the home page and handles the add-user form.
GET renders the list, POST inserts and redirects back (303) so a reload
doesn't resubmit the form. Other methods get 405 from the router.
"""

from fastapi import APIRouter, Depends, Form, status
from fastapi.responses import HTMLResponse, PlainTextResponse, RedirectResponse, Response

from db.errors import InsertError, QueryError
from handlers.dependencies import get_user_service
from services.user_service import UserService
from utils.html_renderer import render_home
from utils.logger import get_logger

logger = get_logger(__name__)
router = APIRouter()


@router.get("/", response_class=HTMLResponse)
def home_page(service: UserService = Depends(get_user_service)) -> Response:
    """Render the HTML page listing every user."""
    try:
        users = service.list_users()
    except QueryError:
        return PlainTextResponse("Failed to load users", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
    return HTMLResponse(render_home(users))


@router.post("/")
def add_user(
    name: str = Form(""),
    service: UserService = Depends(get_user_service),
) -> Response:
    """Insert the submitted name, if any, then redirect to the page."""
    try:
        service.add_user(name)
    except InsertError:
        return PlainTextResponse("Failed to add user", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
    return RedirectResponse("/", status_code=status.HTTP_303_SEE_OTHER)
