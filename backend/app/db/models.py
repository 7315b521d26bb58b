"""SQLAlchemy ORM models for the document repository."""

from datetime import datetime

from sqlalchemy import (
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.sql import func


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class Organization(Base):
    """Organization table - sharing boundary for organization-level access."""

    __tablename__ = "organization"

    organization_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    # Relationships
    accounts: Mapped[list["Account"]] = relationship("Account", back_populates="organization")


class Account(Base):
    """Account table - organization-scoped user accounts."""

    __tablename__ = "account"
    __table_args__ = (
        UniqueConstraint("organization_id", "email", name="uq_account_org_email"),
        Index("idx_account_org", "organization_id"),
    )

    account_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    organization_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("organization.organization_id"), nullable=False
    )
    email: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    # Relationships
    organization: Mapped["Organization"] = relationship("Organization", back_populates="accounts")


class DocumentRow(Base):
    """Document table - owner, organization and access level live on the row."""

    __tablename__ = "document"
    __table_args__ = (
        Index("idx_document_account", "account_id"),
        Index("idx_document_org_access", "organization_id", "access"),
    )

    document_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    account_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("account.account_id"), nullable=False
    )
    organization_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("organization.organization_id"), nullable=False
    )
    access: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    source: Mapped[str | None] = mapped_column(Text, nullable=True)
    related_article: Mapped[str | None] = mapped_column(Text, nullable=True)
    published_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    language: Mapped[str] = mapped_column(Text, nullable=False, default="en")
    page_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    full_text: Mapped[str] = mapped_column(Text, nullable=False, default="")
    file_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    # Relationships
    collaborators: Mapped[list["Collaboration"]] = relationship(
        "Collaboration", back_populates="document", cascade="all, delete-orphan"
    )
    sections: Mapped[list["SectionRow"]] = relationship(
        "SectionRow", back_populates="document", cascade="all, delete-orphan"
    )
    entities: Mapped[list["EntityRow"]] = relationship(
        "EntityRow", back_populates="document", cascade="all, delete-orphan"
    )


class Collaboration(Base):
    """Accounts granted write access to a document they do not own."""

    __tablename__ = "collaboration"
    __table_args__ = (
        UniqueConstraint("document_id", "account_id", name="uq_collaboration_doc_account"),
        Index("idx_collaboration_account", "account_id"),
    )

    collaboration_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    document_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("document.document_id", ondelete="CASCADE"), nullable=False
    )
    account_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("account.account_id"), nullable=False
    )

    # Relationships
    document: Mapped["DocumentRow"] = relationship("DocumentRow", back_populates="collaborators")


class SectionRow(Base):
    """Section table - chapter markers of a document."""

    __tablename__ = "section"

    section_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    document_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("document.document_id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(Text, nullable=False)
    page: Mapped[int] = mapped_column(Integer, nullable=False)

    # Relationships
    document: Mapped["DocumentRow"] = relationship("DocumentRow", back_populates="sections")


class EntityRow(Base):
    """Entity table - extracted people, places and organizations."""

    __tablename__ = "entity"
    __table_args__ = (Index("idx_entity_document", "document_id"),)

    entity_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    document_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("document.document_id", ondelete="CASCADE"), nullable=False
    )
    kind: Mapped[str] = mapped_column(Text, nullable=False)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    relevance: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    # Relationships
    document: Mapped["DocumentRow"] = relationship("DocumentRow", back_populates="entities")


class NoteRow(Base):
    """Note table - annotations pinned to a document page."""

    __tablename__ = "note"
    __table_args__ = (Index("idx_note_document", "document_id"),)

    note_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    document_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("document.document_id", ondelete="CASCADE"), nullable=False
    )
    account_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("account.account_id"), nullable=False
    )
    organization_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("organization.organization_id"), nullable=False
    )
    page: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    # NULL inherits the document's access level
    access: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


class ProjectRow(Base):
    """Project table - account-owned document collections."""

    __tablename__ = "project"
    __table_args__ = (Index("idx_project_account", "account_id"),)

    project_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    account_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("account.account_id"), nullable=False
    )
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    # Relationships
    memberships: Mapped[list["ProjectMembership"]] = relationship(
        "ProjectMembership", back_populates="project", cascade="all, delete-orphan"
    )


class ProjectMembership(Base):
    """Many-to-many link between projects and documents."""

    __tablename__ = "project_membership"
    __table_args__ = (
        UniqueConstraint("project_id", "document_id", name="uq_membership_project_doc"),
        Index("idx_membership_document", "document_id"),
    )

    membership_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    project_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("project.project_id", ondelete="CASCADE"), nullable=False
    )
    document_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("document.document_id", ondelete="CASCADE"), nullable=False
    )

    # Relationships
    project: Mapped["ProjectRow"] = relationship("ProjectRow", back_populates="memberships")
