"""Read/write collaborators for opportunity records.

``PostgresOpportunitySource`` walks the account hierarchy below a source
account and returns opportunities linked to any account in it, either through
the broker or the insured relationship.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Protocol

import psycopg
import psycopg.rows
import psycopg_pool

from core.errors import LoadError, SaveError
from core.log import get_logger
from core.relations import RelationContext
from core.responses import make_ref


logger = get_logger(__name__)


@dataclass(frozen=True)
class OpportunityQuery:
    source_id: str
    relation_context: RelationContext = RelationContext.BROKER
    pipeline_type: str | None = None
    new_renewal_type: str | None = None
    stage_name: str | None = None
    require_expiry_date: bool = False
    require_inception_date: bool = False
    sort_field: str | None = None
    sort_direction: str | None = None


class OpportunitySource(Protocol):
    async def fetch(self, query: OpportunityQuery) -> list[dict[str, Any]]: ...

    async def update(self, drafts: Sequence[Any]) -> None: ...


# ---------------------------------------------------------------------------
# SQL Queries
# ---------------------------------------------------------------------------

# Record field -> column, for sorting and for inline updates
FIELD_COLUMNS = {
    "Name": "o.opp_name",
    "StageName": "o.stage_name",
    "Amount": "o.amount",
    "CloseDate": "o.close_date",
    "GrossPremium": "o.gross_premium",
    "PipelineType": "o.pipeline_type",
    "NewRenewal": "o.new_renewal",
    "ExpiryDate": "o.expiry_date",
    "InceptionDate": "o.inception_date",
}

EDITABLE_FIELDS = {
    "Name": "opp_name",
    "StageName": "stage_name",
    "Amount": "amount",
    "CloseDate": "close_date",
    "GrossPremium": "gross_premium",
    "PipelineType": "pipeline_type",
    "NewRenewal": "new_renewal",
    "ExpiryDate": "expiry_date",
    "InceptionDate": "inception_date",
}

RELATION_COLUMNS = {
    RelationContext.BROKER: "o.broker_id",
    RelationContext.INSURED: "o.insured_id",
}

DEFAULT_SORT_FIELD = "CloseDate"


def sort_clause(sort_field: str | None, sort_direction: str | None) -> str:
    """ORDER BY body from whitelisted field/direction values."""
    column = FIELD_COLUMNS.get(sort_field or "", FIELD_COLUMNS[DEFAULT_SORT_FIELD])
    direction = "DESC" if (sort_direction or "").strip().upper() == "DESC" else "ASC"
    return f"{column} {direction} NULLS LAST, o.id"


def query_filters(query: OpportunityQuery) -> tuple[list[str], dict[str, Any]]:
    """Extra WHERE conditions and their parameters for the business filters."""
    conditions: list[str] = []
    params: dict[str, Any] = {}
    if query.pipeline_type and query.pipeline_type not in ("Both", "Any"):
        conditions.append("o.pipeline_type = %(pipeline_type)s")
        params["pipeline_type"] = query.pipeline_type
    if query.new_renewal_type and query.new_renewal_type != "Any":
        conditions.append("o.new_renewal = %(new_renewal_type)s")
        params["new_renewal_type"] = query.new_renewal_type
    if query.stage_name:
        conditions.append("o.stage_name = %(stage_name)s")
        params["stage_name"] = query.stage_name
    if query.require_expiry_date:
        conditions.append("o.expiry_date IS NOT NULL")
    if query.require_inception_date:
        conditions.append("o.inception_date IS NOT NULL")
    return conditions, params


def sql_select_hierarchy_opportunities(query: OpportunityQuery) -> tuple[str, dict[str, Any]]:
    """Opportunities linked to the source account or any account below it."""
    conditions, params = query_filters(query)
    params["account_id"] = query.source_id
    relation_column = RELATION_COLUMNS[query.relation_context]
    extra = "".join(f"\n            AND {c}" for c in conditions)
    sql = f"""
        WITH RECURSIVE hierarchy AS (
            SELECT id FROM crm.accounts WHERE id = %(account_id)s
            UNION
            SELECT a.id
            FROM crm.accounts a
            JOIN hierarchy h ON a.parent_id = h.id
        )
        SELECT
            o.id,
            o.opp_name,
            o.stage_name,
            o.amount,
            o.close_date,
            o.gross_premium,
            o.pipeline_type,
            o.new_renewal,
            o.expiry_date,
            o.inception_date,
            o.broker_id,
            b.acc_name AS broker_name,
            o.insured_id,
            i.acc_name AS insured_name,
            o.account_id,
            a.acc_name AS account_name,
            o.owner_id,
            u.full_name AS owner_name
        FROM crm.opportunities o
        LEFT JOIN crm.accounts b ON b.id = o.broker_id
        LEFT JOIN crm.accounts i ON i.id = o.insured_id
        LEFT JOIN crm.accounts a ON a.id = o.account_id
        LEFT JOIN users u ON u.id = o.owner_id
        WHERE {relation_column} IN (SELECT id FROM hierarchy){extra}
        ORDER BY {sort_clause(query.sort_field, query.sort_direction)}
    """
    return sql, params


def sql_select_existing_ids() -> str:
    return "SELECT id::text FROM crm.opportunities WHERE id::text = ANY(%(ids)s)"


def sql_update_opportunity(fields: set[str]) -> str:
    """Update opportunity fields dynamically."""
    updates = [f"{EDITABLE_FIELDS[f]} = %({f})s" for f in sorted(fields) if f in EDITABLE_FIELDS]
    if not updates:
        raise ValueError("No valid fields to update")
    return f"""
        UPDATE crm.opportunities
        SET {", ".join(updates)}
        WHERE id::text = %(id)s
    """


def _ref(related_id: Any, name: str | None) -> dict[str, Any] | None:
    if related_id is None:
        return None
    return make_ref(str(related_id), name)


def transform_opportunity_row(row: dict) -> dict:
    """Transform a raw opportunity row into a record with nested relationships."""
    return {
        "Id": str(row["id"]),
        "Name": row["opp_name"],
        "StageName": row["stage_name"],
        "Amount": row["amount"],
        "CloseDate": row["close_date"],
        "GrossPremium": row["gross_premium"],
        "PipelineType": row["pipeline_type"],
        "NewRenewal": row["new_renewal"],
        "ExpiryDate": row["expiry_date"],
        "InceptionDate": row["inception_date"],
        "BrokerId": _id(row["broker_id"]),
        "Broker": _ref(row["broker_id"], row["broker_name"]),
        "InsuredId": _id(row["insured_id"]),
        "Insured": _ref(row["insured_id"], row["insured_name"]),
        "AccountId": _id(row["account_id"]),
        "Account": _ref(row["account_id"], row["account_name"]),
        "OwnerId": _id(row["owner_id"]),
        "Owner": _ref(row["owner_id"], row["owner_name"]),
    }


def _id(value: Any) -> str | None:
    return str(value) if value is not None else None


def group_drafts(drafts: Sequence[Any]) -> tuple[dict[str, dict[str, Any]], list[dict[str, str]]]:
    """Group draft edits per record, collecting errors for fields that cannot be edited."""
    grouped: dict[str, dict[str, Any]] = {}
    errors: list[dict[str, str]] = []
    for draft in drafts:
        if draft.field_name not in EDITABLE_FIELDS:
            errors.append({"message": f"Field is not editable: {draft.field_name}"})
            continue
        grouped.setdefault(str(draft.record_id), {})[draft.field_name] = draft.new_value
    return grouped, errors


class PostgresOpportunitySource:
    """Opportunity collaborator backed by the connection pool."""

    def __init__(self, pool: psycopg_pool.AsyncConnectionPool):
        self.pool = pool

    async def fetch(self, query: OpportunityQuery) -> list[dict[str, Any]]:
        sql, params = sql_select_hierarchy_opportunities(query)
        try:
            async with self.pool.connection() as conn:
                async with conn.cursor(row_factory=psycopg.rows.dict_row) as cur:
                    await cur.execute(sql, params)
                    rows = await cur.fetchall()
        except psycopg.Error as e:
            logger.error("Opportunity query failed: %s", e)
            raise LoadError(str(e), body={"message": str(e)}) from e
        return [transform_opportunity_row(dict(row)) for row in rows]

    async def update(self, drafts: Sequence[Any]) -> None:
        grouped, errors = group_drafts(drafts)
        if errors:
            raise SaveError(errors[0]["message"], body=errors)
        if not grouped:
            return
        try:
            async with self.pool.connection() as conn:
                async with conn.transaction():
                    async with conn.cursor() as cur:
                        await cur.execute(sql_select_existing_ids(), {"ids": list(grouped)})
                        existing = {row[0] for row in await cur.fetchall()}
                        missing = [
                            {"message": f"Opportunity not found: {record_id}"}
                            for record_id in grouped
                            if record_id not in existing
                        ]
                        if missing:
                            raise SaveError(missing[0]["message"], body=missing)
                        for record_id, values in grouped.items():
                            await cur.execute(
                                sql_update_opportunity(set(values)),
                                {**values, "id": record_id},
                            )
        except psycopg.Error as e:
            logger.error("Opportunity update failed: %s", e)
            raise SaveError(str(e), body={"message": str(e)}) from e
        logger.info("Updated %d opportunities", len(grouped))
