"""Caller-dependent visibility scopes.

Scopes are predicates, not result sets: repositories and the search index
receive a scope and apply it themselves (in Python for the in-memory
backends, compiled to SQL in ``backend.app.db.queries``). Fetch-by-id and
search go through the same ``DocumentScope``, so they can never disagree on
who sees what.
"""

from dataclasses import dataclass
from enum import Enum

from backend.app.access.policy import can_read
from backend.app.db.context import Anonymous, Authenticated, Caller
from backend.app.models.access import Access
from backend.app.models.documents import Document, Note, Project


@dataclass(frozen=True)
class DocumentScope:
    """Documents readable by ``caller``."""

    caller: Caller

    @property
    def account_id(self) -> int | None:
        return self.caller.account_id if isinstance(self.caller, Authenticated) else None

    @property
    def organization_id(self) -> int | None:
        return self.caller.organization_id if isinstance(self.caller, Authenticated) else None

    def matches(self, document: Document) -> bool:
        return can_read(self.caller, document)


@dataclass(frozen=True)
class ProjectScope:
    """Projects owned by ``account_id``; ``None`` is the empty scope."""

    account_id: int | None

    @property
    def is_empty(self) -> bool:
        return self.account_id is None

    def matches(self, project: Project) -> bool:
        return not self.is_empty and project.account_id == self.account_id


class NoteMode(str, Enum):
    """How note visibility is resolved."""

    accessible = "accessible"
    unrestricted = "unrestricted"


@dataclass(frozen=True)
class NoteScope:
    """Notes visible to ``caller``.

    ``unrestricted`` ignores identity and is only produced for anonymous
    callers, where it reduces to "public note on a readable document".
    """

    caller: Caller
    mode: NoteMode

    def matches(self, note: Note, document: Document) -> bool:
        if self.mode is NoteMode.unrestricted:
            return note_visible_to(Anonymous(), note, document)
        return note_visible_to(self.caller, note, document)


@dataclass(frozen=True)
class _NoteGrant:
    """Policy view of a note: its own flag, or the parent's level when unset."""

    account_id: int
    organization_id: int
    access: Access
    collaborator_ids: frozenset[int]


def documents_visible_to(caller: Caller) -> DocumentScope:
    """Owned, collaborated, shared with the caller's organization, or public."""
    return DocumentScope(caller=caller)


def projects_visible_to(caller: Caller) -> ProjectScope:
    """Projects are never shared; anonymous callers get the empty scope."""
    if isinstance(caller, Authenticated):
        return ProjectScope(account_id=caller.account_id)
    return ProjectScope(account_id=None)


def notes_visible_to(caller: Caller) -> NoteScope:
    if isinstance(caller, Authenticated):
        return NoteScope(caller=caller, mode=NoteMode.accessible)
    return NoteScope(caller=caller, mode=NoteMode.unrestricted)


def note_visible_to(caller: Caller, note: Note, document: Document) -> bool:
    """Whether ``caller`` may read ``note`` on ``document``.

    The parent must be readable first. The note's own access flag decides
    next, falling back to the document's level when the note carries none.
    The document's owner and collaborators count as editors of every note.
    """
    if note.document_id != document.id or not can_read(caller, document):
        return False

    grant = _NoteGrant(
        account_id=note.account_id,
        organization_id=note.organization_id,
        access=note.access if note.access is not None else document.access,
        collaborator_ids=document.collaborator_ids | {document.account_id},
    )
    return can_read(caller, grant)
