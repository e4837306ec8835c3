"""Seed data for opportunities spread across the sample hierarchies."""

import datetime
import itertools

from seed.accounts import BROKER_IDS, INSURED_IDS
from seed.users import SAMPLE_USERS

STAGES = ["Prospecting", "Quoted", "Negotiation", "Bound", "Declined"]
OPPORTUNITY_COUNT = 25


def build_opportunities() -> list[dict]:
    """Deterministic sample opportunities, enough for three pages of ten."""
    owners = itertools.cycle(user["id"] for user in SAMPLE_USERS)
    brokers = itertools.cycle(BROKER_IDS)
    insureds = itertools.cycle(INSURED_IDS)
    start = datetime.date(2026, 1, 15)
    opportunities = []
    for n in range(1, OPPORTUNITY_COUNT + 1):
        renewal = n % 3 == 0
        inception = start + datetime.timedelta(days=14 * n)
        insured_id = next(insureds)
        opportunities.append({
            "id": f"30000000-0000-0000-0000-{n:012d}",
            "opp_name": f"{'Renewal' if renewal else 'Cargo'} Programme {n:02d}",
            "stage_name": STAGES[n % len(STAGES)],
            "amount": 25000 + 1500 * n,
            "close_date": inception - datetime.timedelta(days=30),
            "gross_premium": 4000 + 275 * n,
            "pipeline_type": "Renewal" if renewal else "Pipeline",
            "new_renewal": "Renewal" if renewal else "New",
            "expiry_date": inception + datetime.timedelta(days=365) if n % 4 else None,
            "inception_date": inception,
            "broker_id": next(brokers),
            "insured_id": insured_id,
            "account_id": insured_id,
            "owner_id": next(owners),
        })
    return opportunities


async def seed_opportunities(conn) -> None:
    """Insert the sample opportunities."""
    opportunities = build_opportunities()
    async with conn.cursor() as cur:
        for opp in opportunities:
            await cur.execute(
                """
                INSERT INTO crm.opportunities (
                    id, opp_name, stage_name, amount, close_date, gross_premium,
                    pipeline_type, new_renewal, expiry_date, inception_date,
                    broker_id, insured_id, account_id, owner_id
                )
                VALUES (
                    %(id)s, %(opp_name)s, %(stage_name)s, %(amount)s, %(close_date)s,
                    %(gross_premium)s, %(pipeline_type)s, %(new_renewal)s,
                    %(expiry_date)s, %(inception_date)s, %(broker_id)s,
                    %(insured_id)s, %(account_id)s, %(owner_id)s
                )
                ON CONFLICT (id) DO NOTHING
                """,
                opp,
            )
    print(f"Seeded {len(opportunities)} opportunities")


async def clear_opportunities(conn) -> None:
    """Remove seeded opportunities."""
    ids = [opp["id"] for opp in build_opportunities()]
    async with conn.cursor() as cur:
        await cur.execute(
            "DELETE FROM crm.opportunities WHERE id = ANY(%(ids)s::uuid[])",
            {"ids": ids},
        )
    print("Cleared seeded opportunities")
