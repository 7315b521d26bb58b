"""Access decisions for documents, notes and projects.

Every handler and every scope consults these functions; nothing else in the
service decides who may read or mutate a resource. All functions are pure.
"""

from typing import Protocol

from backend.app.db.context import Authenticated, Caller
from backend.app.models.access import Access
from backend.app.models.documents import Project


class Protected(Protocol):
    """Anything carrying document-style access-control fields."""

    @property
    def account_id(self) -> int: ...

    @property
    def organization_id(self) -> int: ...

    @property
    def access(self) -> Access: ...

    @property
    def collaborator_ids(self) -> frozenset[int]: ...


Resource = Protected | Project


def _is_owner(caller: Caller, resource: Resource) -> bool:
    return isinstance(caller, Authenticated) and caller.account_id == resource.account_id


def _owns_or_collaborates(caller: Caller, resource: Protected) -> bool:
    if not isinstance(caller, Authenticated):
        return False
    return (
        caller.account_id == resource.account_id
        or caller.account_id in resource.collaborator_ids
    )


def can_read(caller: Caller, resource: Resource) -> bool:
    """Whether the caller may see the resource at all."""
    if isinstance(resource, Project):
        return _is_owner(caller, resource)

    if resource.access.is_public:
        return True

    if _owns_or_collaborates(caller, resource):
        return True

    if resource.access == Access.ORGANIZATION:
        return (
            isinstance(caller, Authenticated)
            and caller.organization_id == resource.organization_id
        )

    # PRIVATE and PENDING stay with owner and collaborators
    return False


def can_write(caller: Caller, resource: Resource) -> bool:
    """Whether the caller may change the resource's attributes."""
    if isinstance(resource, Project):
        return _is_owner(caller, resource)
    return _owns_or_collaborates(caller, resource)


def can_destroy(caller: Caller, resource: Resource) -> bool:
    """Whether the caller may delete the resource.

    Projects can only be destroyed by their owner; documents and notes by
    anyone who can write them.
    """
    if isinstance(resource, Project):
        return _is_owner(caller, resource)
    return can_write(caller, resource)
