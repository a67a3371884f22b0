"""Seed a sample constituency: one district, ward and center, four candidates.

This script is idempotent - records that already exist (by name) are kept.
"""

import asyncio

import asyncpg

from votetally.core.config import get_settings
from votetally.services import candidates as candidate_service
from votetally.services import geographic as geo_service

DISTRICT = "Nkhotakota Central"
WARD = "Ward 1 - Mwansambo"
CENTER = {
    "center_number": "C-123",
    "name": "Mwansambo Primary School",
    "registered_voters": 420,
}
CANDIDATES = [
    ("Penyani Jamane", "Independent"),
    ("Candidate B", "MCP"),
    ("Candidate C", "DPP"),
    ("Candidate D", "UTM"),
]


async def seed_data():
    settings = get_settings()
    conn = await asyncpg.connect(dsn=settings.DATABASE_URL)

    print("=" * 60)
    print("SEEDING SAMPLE CONSTITUENCY")
    print("=" * 60)

    try:
        async with conn.transaction():
            district_id = await conn.fetchval(
                "SELECT id FROM districts WHERE name = $1", DISTRICT
            )
            if not district_id:
                district_id = (await geo_service.create_district(conn, DISTRICT))["id"]
                print(f"✓ Added district: {DISTRICT}")
            else:
                print(f"✓ District already exists: {DISTRICT}")

            ward_id = await conn.fetchval(
                "SELECT id FROM wards WHERE district_id = $1 AND name = $2",
                str(district_id),
                WARD,
            )
            if not ward_id:
                ward_id = (await geo_service.create_ward(conn, district_id, WARD))["id"]
                print(f"✓ Added ward: {WARD}")
            else:
                print(f"✓ Ward already exists: {WARD}")

            center_id = await conn.fetchval(
                "SELECT id FROM centers WHERE ward_id = $1 AND center_number = $2",
                str(ward_id),
                CENTER["center_number"],
            )
            if not center_id:
                await geo_service.create_center(conn, ward_id, **CENTER)
                print(f"✓ Added center: {CENTER['name']}")
            else:
                print(f"✓ Center already exists: {CENTER['name']}")

            for name, party in CANDIDATES:
                exists = await conn.fetchval(
                    "SELECT id FROM candidates WHERE name = $1", name
                )
                if exists:
                    print(f"✓ Candidate already exists: {name}")
                    continue
                await candidate_service.create_candidate(conn, name, party)
                print(f"✓ Added candidate: {name} ({party})")

        print("\n" + "=" * 60)
        print("Data seeding completed!")
        print("=" * 60)
    finally:
        await conn.close()


if __name__ == "__main__":
    asyncio.run(seed_data())
