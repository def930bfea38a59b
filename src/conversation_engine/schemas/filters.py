"""
Filter value objects accepted by the conversation queries.

Each sub-filter is optional and an absent key is a true no-op. Fields accept
either snake_case names or the camelCase keys a GraphQL resolver receives, e.g.

    ConversationFilter.model_validate({
        "assignmentsFilter": {"texterId": -2},
        "contactsFilter": {"messageStatus": "needsResponse", "errorCode": [0]},
    })
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


# Sentinel texter id meaning "contact has no assignment"
UNASSIGNED_TEXTER_ID = -2

# Tag filter wildcard: "contact has at least one tag"
ANY_TAG = "*"

# Suppressed tag ids arrive prefixed (e.g. "s_12")
SUPPRESSED_TAG_PREFIX = "s_"


def _lower_camel(name: str) -> str:
    camel = to_camel(name)
    return camel[:1].lower() + camel[1:]


class _FilterModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=_lower_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def is_set(self, field_name: str) -> bool:
        """True when the caller supplied `field_name`, even with a falsy value."""
        return field_name in self.model_fields_set


class CampaignsFilter(_FilterModel):
    is_archived: bool | None = None
    campaign_id: int | None = None
    campaign_ids: list[int] | None = None
    search_string: str | None = None


class AssignmentsFilter(_FilterModel):
    texter_id: int | None = None
    # When True, texter_id matches the sender of a message instead of the assignment owner
    sender: bool = False

    @property
    def filters_by_assignment(self) -> bool:
        return bool(self.texter_id) and not self.sender

    @property
    def filters_by_sender(self) -> bool:
        return self.sender


class ContactsFilter(_FilterModel):
    message_status: str | None = None
    updated_at_gt: datetime | None = None
    updated_at_lt: datetime | None = None
    is_opted_out: bool | None = None
    error_code: list[int] | None = None
    tags: list[str] | None = None
    suppressed_tags: list[str] | None = None
    order_by_raw: str | None = None

    @field_validator("tags", "suppressed_tags", mode="before")
    @classmethod
    def _tag_ids_as_strings(cls, v):
        # Tag ids may arrive as ints or strings ("12", "s_12", "*")
        if isinstance(v, (list, tuple)):
            return [str(t) if isinstance(t, int) and not isinstance(t, bool) else t for t in v]
        return v

    @field_validator("tags")
    @classmethod
    def _wildcard_stands_alone(cls, v: list[str] | None) -> list[str] | None:
        if v and ANY_TAG in v and len(v) > 1:
            raise ValueError(f"'{ANY_TAG}' cannot be combined with other tag ids")
        return v

    def tag_ids(self) -> list[int]:
        return [int(t) for t in self.tags or []]

    def suppressed_tag_ids(self) -> list[int]:
        return [int(t.replace(SUPPRESSED_TAG_PREFIX, "")) for t in self.suppressed_tags or []]


class ConversationFilter(_FilterModel):
    campaigns_filter: CampaignsFilter | None = None
    assignments_filter: AssignmentsFilter | None = None
    contacts_filter: ContactsFilter | None = None
    message_text_filter: str | None = None


__all__ = [
    "UNASSIGNED_TEXTER_ID",
    "ANY_TAG",
    "SUPPRESSED_TAG_PREFIX",
    "CampaignsFilter",
    "AssignmentsFilter",
    "ContactsFilter",
    "ConversationFilter",
]
