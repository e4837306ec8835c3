"""Relationship fields an opportunity can link to."""

import enum
from dataclasses import dataclass


class RelationContext(enum.Enum):
    """Which related account the RelatedAccount column reflects."""

    BROKER = "Broker"
    INSURED = "Insured"

    @classmethod
    def coerce(cls, value: "RelationContext | str | None") -> "RelationContext":
        """Map a host-provided value to a context; anything unknown is Broker."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            for member in cls:
                if member.value.lower() == value.strip().lower():
                    return member
        return cls.BROKER


@dataclass(frozen=True)
class Relationship:
    """A lookup on the raw record and the display keys derived from it."""

    name: str
    id_field: str  # raw field holding the related record id
    object_field: str  # raw field holding the nested {Id, Name} object
    link_key: str  # derived navigation path
    name_key: str  # derived display name


RELATIONSHIPS: dict[str, Relationship] = {
    "Broker": Relationship("Broker", "BrokerId", "Broker", "brokerLink", "BrokerName"),
    "Insured": Relationship("Insured", "InsuredId", "Insured", "insuredLink", "InsuredName"),
    "Owner": Relationship("Owner", "OwnerId", "Owner", "ownerLink", "OwnerName"),
    "Account": Relationship("Account", "AccountId", "Account", "accountLink", "AccountName"),
}

# The RelatedAccount column reads one of these, depending on the context
CONTEXT_RELATIONSHIPS: dict[RelationContext, Relationship] = {
    RelationContext.BROKER: RELATIONSHIPS["Broker"],
    RelationContext.INSURED: RELATIONSHIPS["Insured"],
}

RELATED_ACCOUNT_LINK = "relatedAccountLink"
RELATED_ACCOUNT_NAME = "RelatedAccountName"
RECORD_LINK = "oppLink"
