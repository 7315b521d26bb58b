"""Caller identity for request-scoped access decisions."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Anonymous:
    """Caller without an authenticated account."""


@dataclass(frozen=True)
class Authenticated:
    """Caller resolved to an account inside an organization.

    Used to enforce ownership and organization-sharing rules in every
    repository and policy call.
    """

    account_id: int
    organization_id: int


Caller = Anonymous | Authenticated

ANONYMOUS = Anonymous()
