"""Seed data for users table - opportunity owners."""

DEV_USER_ID = "00000000-0000-0000-0000-000000000001"

SAMPLE_USERS = [
    {
        "id": DEV_USER_ID,
        "username": "admin",
        "full_name": "System Administrator",
        "descr": "Full system access",
    },
    {
        "id": "00000000-0000-0000-0000-000000000002",
        "username": "jsmith",
        "full_name": "John Smith",
        "descr": "Broker relationship manager",
    },
    {
        "id": "00000000-0000-0000-0000-000000000003",
        "username": "mjones",
        "full_name": "Mary Jones",
        "descr": "Underwriter",
    },
]


async def seed_users(conn) -> None:
    """Insert sample users."""
    async with conn.cursor() as cur:
        for user in SAMPLE_USERS:
            await cur.execute(
                "SELECT id FROM users WHERE id = %(id)s",
                {"id": user["id"]},
            )
            if await cur.fetchone():
                print(f"User already exists: {user['username']}")
                continue

            await cur.execute(
                """
                INSERT INTO users (id, username, full_name, descr)
                VALUES (%(id)s, %(username)s, %(full_name)s, %(descr)s)
                """,
                user,
            )
            print(f"Created user: {user['username']} (id: {user['id']})")


async def clear_users(conn) -> None:
    """Remove all seeded users."""
    async with conn.cursor() as cur:
        user_ids = [user["id"] for user in SAMPLE_USERS]
        await cur.execute(
            "DELETE FROM users WHERE id = ANY(%(ids)s::uuid[])",
            {"ids": user_ids},
        )
        print("Cleared seeded users")
