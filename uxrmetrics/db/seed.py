"""Bootstrap data: the default tag taxonomy and the admin account."""

from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from uxrmetrics.db.models import CategoryModel, TagModel, UserModel
from uxrmetrics.models import UserRole

logger = logging.getLogger(__name__)

# name -> (description, color, tags)
DEFAULT_TAXONOMY: dict[str, tuple[str, str, list[str]]] = {
    "Research Type": (
        "Type of research methodology used",
        "#3B82F6",
        [
            "Usability Testing",
            "User Interviews",
            "Survey Research",
            "A/B Testing",
            "Card Sorting",
            "Tree Testing",
            "Diary Studies",
            "Focus Groups",
        ],
    ),
    "Platform": (
        "Platform or product area being researched",
        "#10B981",
        ["Web App", "Mobile App", "Desktop", "API", "Marketing Site", "Admin Panel"],
    ),
    "Audience": (
        "Target audience or user segment",
        "#F59E0B",
        ["New Users", "Existing Users", "Power Users", "Enterprise", "SMB", "Consumer"],
    ),
}


async def seed_taxonomy(session: AsyncSession) -> tuple[int, int]:
    """Create missing default categories and tags.

    Existing rows (matched by name, case-insensitively) are left untouched, so
    running this repeatedly is safe.

    Returns:
        ``(categories_created, tags_created)``
    """
    categories_created = tags_created = 0

    for name, (description, color, tag_names) in DEFAULT_TAXONOMY.items():
        category = (
            await session.execute(
                select(CategoryModel).where(func.lower(CategoryModel.name) == name.lower())
            )
        ).scalar_one_or_none()
        if category is None:
            category = CategoryModel(name=name, description=description, color=color)
            session.add(category)
            await session.flush()
            categories_created += 1

        for tag_name in tag_names:
            exists = (
                await session.execute(
                    select(TagModel.id).where(func.lower(TagModel.name) == tag_name.lower())
                )
            ).scalar_one_or_none()
            if exists is None:
                session.add(TagModel(name=tag_name, category_id=category.id))
                tags_created += 1

    await session.flush()
    logger.info("Seeded %d categories and %d tags", categories_created, tags_created)
    return categories_created, tags_created


async def ensure_admin_user(
    session: AsyncSession, email: str, password_hash: str, name: str = "UXR Admin"
) -> tuple[UserModel, bool]:
    """Create the user as ADMIN, or promote and re-password an existing one.

    Returns:
        ``(user, created)``
    """
    user = (
        await session.execute(
            select(UserModel).where(func.lower(UserModel.email) == email.lower())
        )
    ).scalar_one_or_none()

    if user is None:
        user = UserModel(
            email=email.lower(), name=name, password_hash=password_hash, role=UserRole.ADMIN.value
        )
        session.add(user)
        created = True
    else:
        user.password_hash = password_hash
        user.role = UserRole.ADMIN.value
        created = False

    await session.flush()
    return user, created
