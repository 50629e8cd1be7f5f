"""
utils/html_renderer.py
----------------------
Builds the home page. Pure functions only: no database access, no I/O,
so the markup can be tested on its own.
"""

from html import escape
from typing import Iterable

from models.user import User

PAGE_TITLE = "Users App"

_PAGE_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{title}</title>
</head>
<body>
    <h1>Welcome to {title}</h1>
    <h2>Add a User</h2>
    <form action="/" method="post">
        <label for="name">Name:</label>
        <input type="text" id="name" name="name" required>
        <button type="submit">Add</button>
    </form>
    <h2>All Users</h2>
    <ul>
{items}
    </ul>
    <p><a href="/_internal/health">Health Check</a> | <a href="/api/users">JSON API</a></p>
</body>
</html>
"""


def render_user_item(user: User) -> str:
    """Render one `<li>` entry as `id - name`, HTML-escaped."""
    return f"        <li>{user.id} - {escape(user.name)}</li>"


def render_home(users: Iterable[User]) -> bytes:
    """
    Render the home page listing `users` in the given order.

    Returns:
        The UTF-8 encoded page.
    """
    items = [render_user_item(u) for u in users]
    if not items:
        items = ["        <li>No users yet.</li>"]
    page = _PAGE_TEMPLATE.format(title=escape(PAGE_TITLE), items="\n".join(items))
    return page.encode("utf-8")
