"""Dev seeding helper for bearer-token development logins.

``Authorization: Bearer 1:2`` authenticates as the seeded account.
"""

import asyncio

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from backend.app.db.engine import create_all, get_async_engine
from backend.app.db.models import Account, DocumentRow, Organization, SectionRow
from backend.app.models.access import Access

DEV_ORG_ID = 1
DEV_ACCOUNT_ID = 2
DEV_EMAIL = "dev@example.com"

SAMPLE_DOCUMENTS = [
    {
        "title": "City Council Minutes",
        "access": Access.PUBLIC,
        "description": "Minutes of the regular council session.",
        "full_text": "Call to order.\fBudget discussion and vote.\fAdjournment.",
        "page_count": 3,
        "sections": [("Budget", 2)],
    },
    {
        "title": "Draft Investigation Notes",
        "access": Access.PRIVATE,
        "description": "Working notes, not for publication.",
        "full_text": "Interview transcript, first draft.",
        "page_count": 1,
        "sections": [],
    },
]


async def seed_dev_data(engine: AsyncEngine | None = None) -> None:
    """Seed a dev organization, account and sample documents.

    This function is idempotent - safe to run multiple times.
    Creates:
    - Organization with id DEV_ORG_ID if it doesn't exist
    - Account with id DEV_ACCOUNT_ID if it doesn't exist
    - SAMPLE_DOCUMENTS owned by that account, matched by title
    """
    engine = engine or get_async_engine()
    await create_all(engine)

    async with AsyncSession(engine, expire_on_commit=False) as session:
        org = await session.get(Organization, DEV_ORG_ID)
        if not org:
            print(f"Creating dev organization with id {DEV_ORG_ID}...")
            session.add(Organization(organization_id=DEV_ORG_ID, name="Dev Newsroom"))
            await session.flush()
        else:
            print(f"Dev organization already exists: {org.name}")

        account = await session.get(Account, DEV_ACCOUNT_ID)
        if not account:
            print(f"Creating dev account with id {DEV_ACCOUNT_ID}...")
            session.add(
                Account(account_id=DEV_ACCOUNT_ID, organization_id=DEV_ORG_ID, email=DEV_EMAIL)
            )
            await session.flush()
        else:
            print(f"Dev account already exists: {account.email}")

        existing = set(
            (
                await session.execute(
                    select(DocumentRow.title).where(DocumentRow.account_id == DEV_ACCOUNT_ID)
                )
            ).scalars()
        )

        for sample in SAMPLE_DOCUMENTS:
            if sample["title"] in existing:
                continue
            print(f"Creating sample document {sample['title']!r}...")
            row = DocumentRow(
                account_id=DEV_ACCOUNT_ID,
                organization_id=DEV_ORG_ID,
                access=int(sample["access"]),
                title=sample["title"],
                description=sample["description"],
                full_text=sample["full_text"],
                page_count=sample["page_count"],
            )
            row.sections = [SectionRow(title=t, page=p) for t, p in sample["sections"]]
            session.add(row)

        await session.commit()
        print("Dev seeding complete")


if __name__ == "__main__":
    asyncio.run(seed_dev_data())
