#!/usr/bin/env python3
"""
Seed script: commits demo technician assessments through the engine so the
history view has something to show.
Run after migrations: python scripts/seed.py
"""

import asyncio
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from cams.config import settings
from cams.database import get_engine_url_and_connect_args
from cams.engine.rules import get_rule_table
from cams.storage.repositories import commit_assessment, get_assessment

ACTOR = "seed-script"

# Each technician: initial selections, then edits applied as follow-up commits
DEMO_TECHNICIANS = {
    "tech-001": (
        {"certification_tier": "C", "internal_experience": "1year", "education": ["wind"]},
        [
            {"internal_experience": "2years"},
            {"certification_tier": "B", "extra_courses": ["esq"]},
        ],
    ),
    "tech-002": (
        {
            "certification_tier": "B",
            "internal_experience": "1year",
            "external_experience": "2-3",
            "education": ["electrical"],
            "subjective_score": 1,
        },
        [{"subjective_score": 2}],
    ),
    "tech-003": ({"certification_tier": "D"}, []),
}


async def seed():
    url, connect_args = get_engine_url_and_connect_args()
    engine = create_async_engine(url, connect_args=connect_args)
    async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    rules = get_rule_table(settings.rules_path)

    async with async_session() as db:
        for technician_id, (initial, follow_ups) in DEMO_TECHNICIANS.items():
            if await get_assessment(db, technician_id):
                print(f"{technician_id}: already assessed, skipping.")
                continue
            session, _ = await commit_assessment(
                db, rules, technician_id, initial, ACTOR, cap=settings.history_cap
            )
            for edits in follow_ups:
                session, entry = await commit_assessment(
                    db, rules, technician_id, edits, ACTOR, cap=settings.history_cap
                )
                if entry:
                    print(f"{technician_id}: " + "; ".join(entry.changes))
            await db.commit()
            print(
                f"{technician_id}: {session.score.total_points} points, "
                f"level {session.score.level} (version {session.version})"
            )

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(seed())
