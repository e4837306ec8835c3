"""Projection of raw opportunity records into display records."""

from collections.abc import Iterable, Mapping
from typing import Any

from core.relations import (
    CONTEXT_RELATIONSHIPS,
    RECORD_LINK,
    RELATED_ACCOUNT_LINK,
    RELATED_ACCOUNT_NAME,
    RelationContext,
    Relationship,
)


def record_link(record_id: Any) -> str | None:
    """Navigation path for a record id, or None when there is no id."""
    if record_id is None:
        return None
    record_id = str(record_id).strip()
    if not record_id:
        return None
    return "/" + record_id


def related_name(related: Any) -> str | None:
    """Display name from a nested relationship object, if it has one."""
    if not isinstance(related, Mapping):
        return None
    return related.get("Name")


def _related_id(record: Mapping[str, Any], relationship: Relationship) -> Any:
    related_id = record.get(relationship.id_field)
    if related_id is None:
        related = record.get(relationship.object_field)
        if isinstance(related, Mapping):
            related_id = related.get("Id")
    return related_id


def relation_fields(
    record: Mapping[str, Any], relationship: Relationship, link_key: str, name_key: str
) -> dict[str, Any]:
    return {
        link_key: record_link(_related_id(record, relationship)),
        name_key: related_name(record.get(relationship.object_field)),
    }


def enrich_record(
    record: Mapping[str, Any],
    context: RelationContext,
    relations: Iterable[Relationship] = (),
) -> dict[str, Any]:
    """Return a new record with navigation links and related names added."""
    selected = CONTEXT_RELATIONSHIPS[context]
    derived: dict[str, Any] = {RECORD_LINK: record_link(record.get("Id"))}
    derived.update(relation_fields(record, selected, RELATED_ACCOUNT_LINK, RELATED_ACCOUNT_NAME))
    for relationship in relations:
        derived.update(
            relation_fields(record, relationship, relationship.link_key, relationship.name_key)
        )
    return {**record, **derived}


def enrich_records(
    records: Iterable[Mapping[str, Any]],
    context: RelationContext | str | None = None,
    relations: Iterable[Relationship] = (),
) -> list[dict[str, Any]]:
    """Enrich every record, keeping order."""
    context = RelationContext.coerce(context)
    relations = list(relations)
    return [enrich_record(record, context, relations) for record in records]
