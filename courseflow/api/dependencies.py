from __future__ import annotations

import logging
from typing import Annotated

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from courseflow.models.principal import Principal
from courseflow.repos import providers
from courseflow.services import course_view, token_service

logger = logging.getLogger(__name__)

# Tokens are issued elsewhere; tokenUrl only feeds the OpenAPI docs
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/oauth/token")


def require_user(
    raw_token: Annotated[str, Depends(oauth2_scheme)],
) -> Principal:
    """Extract and validate the JWT bearer token. Returns a Principal."""
    try:
        claims = token_service.decode_access_token(raw_token)
    except jwt.ExpiredSignatureError:
        logger.warning("Expired token rejected")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token expired",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None
    except jwt.InvalidTokenError as e:
        logger.warning("Invalid token rejected: %s", e)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None

    principal = Principal(
        user_id=claims["sub"],
        roles=frozenset(claims.get("roles", [])),
    )
    logger.debug(
        "Token validated for user=%s roles=%s", principal.user_id, principal.roles
    )
    return principal


def unavailable(exc: course_view.ProviderFetchError) -> HTTPException:
    """Map a provider failure to the 503 the views show as 'unavailable'."""
    what = "progress" if exc.provider == "progress" else "course"
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=f"{what} unavailable",
    )


async def load_course_snapshots(
    course_id: str,
    principal: Annotated[Principal, Depends(require_user)],
) -> course_view.Snapshots:
    """Fetch outline, progress and role for this learner and course.

    404 when the course does not exist, 503 when any provider fails.
    """
    try:
        return await course_view.load_snapshots(
            providers.course_repo,
            providers.progress_repo,
            providers.user_repo,
            principal,
            course_id,
        )
    except course_view.CourseNotFoundError:
        raise HTTPException(status_code=404, detail="course not found") from None
    except course_view.ProviderFetchError as exc:
        raise unavailable(exc) from None
