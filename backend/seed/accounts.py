"""Seed data for the broker and insured account hierarchies."""

BROKER_GROUP_ID = "10000000-0000-0000-0000-000000000001"
INSURED_GROUP_ID = "20000000-0000-0000-0000-000000000001"

# Parents come before children so the parent_id FK is satisfied
SEED_ACCOUNTS = [
    {"id": BROKER_GROUP_ID, "acc_name": "Harbor Brokers Group", "acc_type": "Broker", "parent_id": None},
    {"id": "10000000-0000-0000-0000-000000000002", "acc_name": "Harbor Brokers London", "acc_type": "Broker", "parent_id": BROKER_GROUP_ID},
    {"id": "10000000-0000-0000-0000-000000000003", "acc_name": "Harbor Brokers Paris", "acc_type": "Broker", "parent_id": BROKER_GROUP_ID},
    {"id": "10000000-0000-0000-0000-000000000004", "acc_name": "Harbor Marine Desk", "acc_type": "Broker", "parent_id": "10000000-0000-0000-0000-000000000002"},
    {"id": INSURED_GROUP_ID, "acc_name": "Northwind Holdings", "acc_type": "Insured", "parent_id": None},
    {"id": "20000000-0000-0000-0000-000000000002", "acc_name": "Northwind Logistics", "acc_type": "Insured", "parent_id": INSURED_GROUP_ID},
    {"id": "20000000-0000-0000-0000-000000000003", "acc_name": "Northwind Retail", "acc_type": "Insured", "parent_id": INSURED_GROUP_ID},
]

BROKER_IDS = [a["id"] for a in SEED_ACCOUNTS if a["acc_type"] == "Broker"]
INSURED_IDS = [a["id"] for a in SEED_ACCOUNTS if a["acc_type"] == "Insured"]


async def seed_accounts(conn) -> None:
    """Insert the sample account hierarchies."""
    async with conn.cursor() as cur:
        for account in SEED_ACCOUNTS:
            await cur.execute(
                """
                INSERT INTO crm.accounts (id, acc_name, acc_type, parent_id)
                VALUES (%(id)s, %(acc_name)s, %(acc_type)s, %(parent_id)s)
                ON CONFLICT (id) DO NOTHING
                """,
                account,
            )
    print(f"Seeded {len(SEED_ACCOUNTS)} accounts")


async def clear_accounts(conn) -> None:
    """Remove seeded accounts, children first."""
    async with conn.cursor() as cur:
        for account in reversed(SEED_ACCOUNTS):
            await cur.execute(
                "DELETE FROM crm.accounts WHERE id = %(id)s",
                {"id": account["id"]},
            )
    print("Cleared seeded accounts")
