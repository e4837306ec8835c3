"""Schema for the account hierarchy and its opportunities."""

SCHEMA_STATEMENTS = [
    "CREATE SCHEMA IF NOT EXISTS crm",
    """
    CREATE TABLE IF NOT EXISTS users (
        id uuid PRIMARY KEY,
        username text NOT NULL UNIQUE,
        full_name text,
        descr text,
        inactive boolean NOT NULL DEFAULT false
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS crm.accounts (
        id uuid PRIMARY KEY,
        acc_name text NOT NULL,
        acc_type text NOT NULL,  -- 'Broker' or 'Insured'
        parent_id uuid REFERENCES crm.accounts(id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS crm.opportunities (
        id uuid PRIMARY KEY,
        opp_name text NOT NULL,
        stage_name text,
        amount numeric(14, 2),
        close_date date,
        gross_premium numeric(14, 2),
        pipeline_type text,  -- 'Pipeline' or 'Renewal'
        new_renewal text,  -- 'New' or 'Renewal'
        expiry_date date,
        inception_date date,
        broker_id uuid REFERENCES crm.accounts(id),
        insured_id uuid REFERENCES crm.accounts(id),
        account_id uuid REFERENCES crm.accounts(id),
        owner_id uuid REFERENCES users(id)
    )
    """,
    "CREATE INDEX IF NOT EXISTS opportunities_broker_idx ON crm.opportunities (broker_id)",
    "CREATE INDEX IF NOT EXISTS opportunities_insured_idx ON crm.opportunities (insured_id)",
    "CREATE INDEX IF NOT EXISTS accounts_parent_idx ON crm.accounts (parent_id)",
]


async def create_schema(conn) -> None:
    """Create the crm schema and tables if they do not exist."""
    async with conn.cursor() as cur:
        for statement in SCHEMA_STATEMENTS:
            await cur.execute(statement)
    print("Schema ready")
