"""
Shared route dependencies.

require_user_id resolves the caller from the auth cookie;
ai_rate_limit throttles the credit-spending assistant routes.
"""
from fastapi import Depends, Request, Response

from collabdocs.core.exceptions import NotAuthenticatedError
from collabdocs.core.rate_limiter import get_rate_limiter
from collabdocs.core.security import AUTH_COOKIE_NAME, parse_auth_token


def require_user_id(request: Request) -> int:
    """
    The authenticated user's id.

    Raises:
        NotAuthenticatedError: Missing, forged or expired auth-token cookie
    """
    user_id = parse_auth_token(request.cookies.get(AUTH_COOKIE_NAME, ""))
    if user_id is None:
        raise NotAuthenticatedError()
    request.state.user_id = user_id
    return user_id


def ai_rate_limit(response: Response, user_id: int = Depends(require_user_id)) -> int:
    """Count one AI request for the caller; adds X-RateLimit-* headers."""
    rate_limiter = get_rate_limiter()
    remaining = rate_limiter.check(f"user-{user_id}")

    response.headers["X-RateLimit-Limit"] = str(rate_limiter.limit)
    response.headers["X-RateLimit-Remaining"] = str(remaining)
    return user_id
