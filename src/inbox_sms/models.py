"""Core data models for message filtering and relay."""

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class LeafPart(BaseModel):
    """A body part carrying encoded bytes."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["leaf"] = "leaf"
    media_type: str = ""  # e.g. "text/plain", "text/html"
    data: str = ""  # base64url payload as delivered by the provider


class ContainerPart(BaseModel):
    """A multipart body part holding ordered child parts."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["container"] = "container"
    media_type: str = ""  # e.g. "multipart/mixed", "multipart/alternative"
    parts: tuple["BodyNode", ...] = Field(min_length=1)


BodyNode = Annotated[LeafPart | ContainerPart, Field(discriminator="kind")]

ContainerPart.model_rebuild()


class MatchCriterion(str, Enum):
    """Whitelist criteria that can accept a message."""

    EXACT_SENDER = "exact_sender"
    DOMAIN = "domain"
    SUBJECT = "subject"
    CONTENT = "content"


class RuleSet(BaseModel):
    """Inclusion and exclusion rules for incoming messages.

    All matching is case-insensitive. ``exact_senders`` requires full equality
    with the sender address, every other field is a substring match.
    ``blocked_senders`` wins over all whitelist fields.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    exact_senders: frozenset[str] = frozenset()
    sender_domains: frozenset[str] = frozenset()
    subject_keywords: frozenset[str] = frozenset()
    content_keywords: frozenset[str] = frozenset()
    blocked_senders: frozenset[str] = frozenset()

    @field_validator("*", mode="before")
    @classmethod
    def _drop_blank_entries(cls, value: Any) -> Any:
        # A blank needle is a substring of everything
        if value is None:
            return frozenset()
        if isinstance(value, str):
            value = [value]
        return frozenset(str(entry).strip() for entry in value if str(entry).strip())

    @property
    def is_empty(self) -> bool:
        return not any(
            (
                self.exact_senders,
                self.sender_domains,
                self.subject_keywords,
                self.content_keywords,
                self.blocked_senders,
            )
        )


class ClassificationResult(BaseModel):
    """Accept/reject decision with the criteria that produced it."""

    model_config = ConfigDict(frozen=True)

    accepted: bool
    matched_criteria: frozenset[MatchCriterion] = frozenset()
    rejected_by_blacklist: bool = False


class Email(BaseModel):
    """Represents a message fetched from a mailbox."""

    id: str
    source: str  # Which connector provided this email
    thread_id: str | None = None
    subject: str = ""
    from_addr: str = ""
    date: datetime | None = None
    snippet: str = ""
    headers: dict[str, str] = Field(default_factory=dict)
    label_ids: list[str] = Field(default_factory=list)
    body: BodyNode = Field(default_factory=LeafPart)


class RelayResult(BaseModel):
    """Result of running one message through the relay."""

    email_id: str
    from_addr: str = ""
    subject: str = ""  # For display in run output
    processed_at: datetime = Field(default_factory=datetime.now)
    classification: ClassificationResult | None = None
    summary: str | None = None
    notified: bool = False
    marked_processed: bool = False
    errors: list[str] = Field(default_factory=list)
    success: bool = True
    dry_run: bool = False

    @property
    def accepted(self) -> bool:
        return self.classification is not None and self.classification.accepted
