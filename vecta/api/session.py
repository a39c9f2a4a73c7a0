"""
Anonymous browser session.

Every request carries a random session token in an http-only cookie; jobs
are owned by it. A missing cookie is replaced by a new token.

Dependencies: fastapi, vecta.configs
System role: Job ownership scoping
"""

import uuid

from fastapi import Depends, Request, Response

from vecta.configs import Settings, get_settings

SESSION_COOKIE_NAME = "session_token"


def get_session_token(
    request: Request,
    response: Response,
    settings: Settings = Depends(get_settings),
) -> str:
    """
    Read the session cookie, issuing a new one when absent.

    Returns:
        str: Session token owning the request's jobs
    """
    token = request.cookies.get(SESSION_COOKIE_NAME)
    if token:
        return token

    token = str(uuid.uuid4())
    response.set_cookie(
        SESSION_COOKIE_NAME,
        token,
        max_age=settings.limits.session_ttl,
        path="/",
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
    )
    return token
