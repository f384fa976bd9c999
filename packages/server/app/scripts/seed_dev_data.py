"""
Seed a development database with a demo organization, players, events and
announcements, then print a session token for the demo admin.

Usage:
    python -m app.scripts.seed_dev_data [--slug sunset-beach] [--admin-email you@example.com]

Reads BVL_DATABASE_URL (defaults to localhost). Safe to run repeatedly.
"""

import argparse
import asyncio
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import structlog
from sqlmodel import select

from app.core.auth import create_session_token
from app.core.config import get_settings
from app.core.database import get_session_context, init_db
from app.core.logging import configure_logging
from app.models.announcement import Announcement
from app.models.event import Event
from app.models.organization import Organization
from app.models.organization_member import OrganizationMember
from app.models.user import User
from app.services.organizations import generate_join_code
from beachvb_shared.schemas.users import CURRENT_PRIVACY_VERSION, CURRENT_TOS_VERSION

log = structlog.get_logger()
settings = get_settings()

PLAYERS = [
    # (auth subject, name, gender, skill, role)
    ("dev-scorer", "Sam Scorer", "FEMALE", "ADVANCED", "SCORER"),
    ("dev-player-1", "Kai Alana", "MALE", "INTERMEDIATE", "MEMBER"),
    ("dev-player-2", "Maya Torres", "FEMALE", "OPEN", "MEMBER"),
    ("dev-player-3", "Jordan Lee", "MALE", "BEGINNER", "MEMBER"),
]

EVENTS = [
    # (name, type, status, visibility, days from today, fee)
    ("Summer Coed 4s", "LEAGUE", "REGISTRATION", "PUBLIC", 14, Decimal("45.00")),
    ("King of the Beach", "TOURNAMENT", "ACTIVE", "PUBLIC", 0, Decimal("30.00")),
    ("Members Night", "LEAGUE", "ACTIVE", "PRIVATE", -7, None),
    ("Fall Doubles", "TOURNAMENT", "DRAFT", "PUBLIC", 60, Decimal("60.00")),
    ("Spring Open", "TOURNAMENT", "COMPLETED", "PUBLIC", -120, Decimal("25.00")),
]


async def _get_or_create_user(session, auth_user_id: str, email: str, name: str,
                              gender: str, skill_level: str) -> User:
    result = await session.execute(select(User).where(User.auth_user_id == auth_user_id))
    user = result.scalar_one_or_none()
    if user:
        return user
    now = datetime.now(timezone.utc)
    user = User(
        auth_user_id=auth_user_id,
        email=email,
        name=name,
        gender=gender,
        skill_level=skill_level,
        is_over_18=True,
        tos_accepted_at=now,
        tos_version=CURRENT_TOS_VERSION,
        privacy_policy_accepted_at=now,
        privacy_policy_version=CURRENT_PRIVACY_VERSION,
    )
    session.add(user)
    await session.flush()
    log.info("seed.user_created", name=name)
    return user


async def seed(slug: str, admin_email: str, create_tables: bool) -> None:
    if create_tables:
        await init_db()

    async with get_session_context() as session:
        result = await session.execute(select(Organization).where(Organization.slug == slug))
        org = result.scalar_one_or_none()
        if org:
            log.info("seed.org_exists", slug=slug)
        else:
            org = Organization(
                name="Sunset Beach Volleyball",
                slug=slug,
                join_code=generate_join_code(),
                timezone="America/Los_Angeles",
                website="https://example.com",
            )
            session.add(org)
            await session.flush()
            log.info("seed.org_created", slug=slug, join_code=org.join_code)

        admin = await _get_or_create_user(
            session, "dev-admin", admin_email, "Alex Admin", "FEMALE", "OPEN"
        )
        members = [(admin, "ADMIN")]
        for auth_id, name, gender, skill, role in PLAYERS:
            user = await _get_or_create_user(
                session, auth_id, f"{auth_id}@example.com", name, gender, skill
            )
            members.append((user, role))

        for user, role in members:
            result = await session.execute(
                select(OrganizationMember).where(
                    OrganizationMember.user_id == user.id,
                    OrganizationMember.organization_id == org.id,
                )
            )
            if not result.scalar_one_or_none():
                session.add(
                    OrganizationMember(user_id=user.id, organization_id=org.id, role=role)
                )

        result = await session.execute(select(Event.id).where(Event.organization_id == org.id))
        if result.first() is None:
            today = date.today()
            for name, etype, status, visibility, offset, fee in EVENTS:
                start = today + timedelta(days=offset)
                session.add(
                    Event(
                        organization_id=org.id,
                        name=name,
                        type=etype,
                        status=status,
                        visibility=visibility,
                        start_date=start if etype == "LEAGUE" else None,
                        tournament_start_date=start if etype == "TOURNAMENT" else None,
                        registration_fee=fee,
                    )
                )
            session.add(
                Announcement(
                    organization_id=org.id,
                    author_id=admin.id,
                    title="Welcome to the new league site",
                    body="Registration for Summer Coed 4s is open. Sign up before the end of the month.",
                )
            )

        join_code = org.join_code

    token, _jti = create_session_token("dev-admin", admin_email)
    print(f"Seeded /{slug} (join code {join_code}).")
    print(f"Dev admin session cookie ({settings.session_cookie_name}):")
    print(token)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed demo data for local development.")
    parser.add_argument("--slug", default="sunset-beach", help="Slug of the demo org")
    parser.add_argument("--admin-email", default="admin@example.com", help="Email of the demo admin")
    parser.add_argument("--create-tables", action="store_true",
                        help="Create tables from the models instead of relying on migrations")

    args = parser.parse_args()

    configure_logging(settings.log_level, "text")
    asyncio.run(seed(args.slug, args.admin_email, args.create_tables))
