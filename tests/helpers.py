"""Callers and constants shared by the test suites."""

from datetime import datetime

from backend.app.db.context import Authenticated

OWNER = Authenticated(account_id=10, organization_id=1)
COLLEAGUE = Authenticated(account_id=11, organization_id=1)
OUTSIDER = Authenticated(account_id=20, organization_id=2)

BASE_TIME = datetime(2026, 1, 1, 12, 0, 0)


def bearer(caller: Authenticated) -> dict[str, str]:
    """Authorization header for a caller."""
    return {"Authorization": f"Bearer {caller.organization_id}:{caller.account_id}"}
