"""Column specification parser.

Turns a compact column string such as ``"Name,StageName,RelatedAccount,Amount"``
into the ordered column metadata the table renders and edits with.
"""

import re

from core.errors import ConfigError
from core.log import get_logger
from core.relations import (
    RECORD_LINK,
    RELATED_ACCOUNT_LINK,
    RELATED_ACCOUNT_NAME,
    RELATIONSHIPS,
    RelationContext,
    Relationship,
)
from core.responses import ColumnMeta


logger = get_logger(__name__)

DEFAULT_COLUMNS = "Name,StageName,RelatedAccount,Amount,CloseDate"

LINK_TARGET = "_blank"

# Fields with a fixed label and render type
TYPED_FIELDS: dict[str, tuple[str, str]] = {
    "GrossPremium": ("Gross Premium", "currency"),
}

TOKEN_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_.]*$")


def tokenize(spec: object) -> list[str]:
    """Split a column string into tokens.

    Raises:
        ConfigError: If the value is not a well-formed token list.
    """
    if not isinstance(spec, str):
        raise ConfigError(f"Column spec must be a string, got {type(spec).__name__}")
    tokens = [part.strip() for part in spec.split(",")]
    tokens = [token for token in tokens if token]
    if not tokens:
        raise ConfigError("Column spec has no tokens")
    bad = [token for token in tokens if not TOKEN_PATTERN.match(token)]
    if bad:
        raise ConfigError(f"Malformed column tokens: {', '.join(bad)}")
    return tokens


def infer_type(field: str) -> str:
    """Render type for a literal field name."""
    lowered = field.lower()
    if "date" in lowered:
        return "date"
    if "amount" in lowered or "premium" in lowered:
        return "currency"
    return "text"


def _relationship_column(label: str, relationship: Relationship) -> ColumnMeta:
    return ColumnMeta(
        key=relationship.link_key,
        label=label,
        type="url",
        label_key=relationship.name_key,
        target=LINK_TARGET,
        relation=relationship.name,
    )


def build_column(token: str, context: RelationContext) -> ColumnMeta:
    """Resolve one token to its column; first matching rule wins."""
    if token == "Name":
        return ColumnMeta(
            key=RECORD_LINK,
            label="Opportunity Name",
            type="url",
            label_key="Name",
            target=LINK_TARGET,
        )
    if token == "RelatedAccount":
        label = "Insured Account" if context is RelationContext.INSURED else "Broker Account"
        return ColumnMeta(
            key=RELATED_ACCOUNT_LINK,
            label=label,
            type="url",
            label_key=RELATED_ACCOUNT_NAME,
            target=LINK_TARGET,
            relation=token,
        )
    if token in RELATIONSHIPS:
        return _relationship_column(token, RELATIONSHIPS[token])
    if token in TYPED_FIELDS:
        label, type_ = TYPED_FIELDS[token]
        return ColumnMeta(key=token, label=label, type=type_, editable=True)
    return ColumnMeta(key=token, label=token, type=infer_type(token), editable=True)


def parse_columns(
    spec: str | None,
    context: RelationContext | str | None = None,
    default: str = DEFAULT_COLUMNS,
) -> list[ColumnMeta]:
    """Parse a column string into ordered column metadata.

    Blank or malformed input falls back to ``default``. Duplicate tokens are
    kept, and the result depends only on the arguments.
    """
    context = RelationContext.coerce(context)
    if spec is None or (isinstance(spec, str) and not spec.strip()):
        tokens = _default_tokens(default)
    else:
        try:
            tokens = tokenize(spec)
        except ConfigError as e:
            logger.warning("Using default columns: %s", e)
            tokens = _default_tokens(default)
    return [build_column(token, context) for token in tokens]


def _default_tokens(default: str) -> list[str]:
    try:
        return tokenize(default)
    except ConfigError as e:
        logger.warning("Deployment default columns rejected (%s), using %s", e, DEFAULT_COLUMNS)
        return tokenize(DEFAULT_COLUMNS)


def required_relations(columns: list[ColumnMeta]) -> list[Relationship]:
    """Relationships the enricher must derive for these alias columns."""
    relations: list[Relationship] = []
    for column in columns:
        relationship = RELATIONSHIPS.get(column.relation or "")
        if relationship and relationship not in relations:
            relations.append(relationship)
    return relations
