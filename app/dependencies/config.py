"""
FastAPI dependency utilities for identifying the acting user.
"""

from http import HTTPStatus
from typing import Optional

from fastapi import Header, HTTPException


def get_current_user_id(
    x_user_id: Optional[str] = Header(
        default=None,
        description="Identifier of the authenticated user, set by the auth gateway.",
    ),
) -> str:
    """Return the acting user's id as forwarded by the authentication layer."""
    user_id = (x_user_id or "").strip()
    if not user_id:
        raise HTTPException(
            status_code=HTTPStatus.UNAUTHORIZED,
            detail="Missing authenticated user.",
        )
    return user_id


__all__ = ["get_current_user_id"]
