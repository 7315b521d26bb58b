"""Caller resolution dependency.

Session and token issuance live in the authentication service; this
dependency only reads the bearer credential it produced. Tokens carry
"<organization_id>:<account_id>".
"""

from typing import Annotated

from fastapi import Header, HTTPException, status

from backend.app.db.context import ANONYMOUS, Authenticated, Caller


async def get_current_caller(
    authorization: Annotated[str | None, Header()] = None,
) -> Caller:
    """Extract the caller from the authorization header.

    Args:
        authorization: Authorization header (e.g., "Bearer 7:42")

    Returns:
        Authenticated caller, or Anonymous when no header is sent

    Raises:
        HTTPException: If the header is present but malformed
    """
    if not authorization:
        return ANONYMOUS

    if not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authorization header format",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = authorization[7:]  # Strip "Bearer "

    if ":" in token:
        try:
            organization_str, account_str = token.split(":", 1)
            return Authenticated(
                account_id=int(account_str),
                organization_id=int(organization_str),
            )
        except ValueError as e:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid token format (expected organization_id:account_id)",
                headers={"WWW-Authenticate": "Bearer"},
            ) from e

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid bearer token",
        headers={"WWW-Authenticate": "Bearer"},
    )
