"""Session token resolution for cart-bound endpoints.

The token comes from the ``X-Session-Id`` header, falling back to the
``storefront_session`` cookie. A fresh token is issued when neither is
present, and the cookie is refreshed on every response.
"""

from uuid import uuid4

from fastapi import Cookie, Header, Response

from storefront.cart.cart import SESSION_TTL
from storefront.utils.logging import add_context

SESSION_HEADER = "X-Session-Id"
SESSION_COOKIE = "storefront_session"


def session_id(
    response: Response,
    x_session_id: str | None = Header(default=None),
    storefront_session: str | None = Cookie(default=None),
) -> str:
    token = x_session_id or storefront_session or uuid4().hex
    response.set_cookie(
        SESSION_COOKIE,
        token,
        max_age=int(SESSION_TTL.total_seconds()),
        httponly=True,
        samesite="lax",
    )
    add_context(session_id=token)
    return token
