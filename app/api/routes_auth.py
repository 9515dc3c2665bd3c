"""Bearer-token authentication dependency.

Tokens are issued by the identity provider; this service only verifies them
and reads the user id from `sub`.
"""
import logging

from fastapi import Header

from app.core.exceptions import UnauthorizedError
from app.core.security import TokenExpiredError, TokenValidationError, decode_token

logger = logging.getLogger(__name__)


def get_current_user_id(authorization: str = Header(None)) -> int:
    if not authorization or not authorization.lower().startswith("bearer "):
        logger.info("auth.token.parse failed: missing_token")
        raise UnauthorizedError("Missing token")
    token = authorization.split(" ", 1)[1]
    try:
        payload = decode_token(token)
        return int(payload["sub"])  # type: ignore
    except TokenExpiredError as exc:
        logger.info("auth.token.expired")
        raise UnauthorizedError("Token expired") from exc
    except (TokenValidationError, KeyError, ValueError) as exc:
        logger.info("auth.token.invalid")
        raise UnauthorizedError("Invalid token") from exc
