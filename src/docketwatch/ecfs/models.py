from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator

from docketwatch.core.models import DocketWatchModel, ensure_utc


class DocketStatus(str, Enum):
    """Lifecycle status of an FCC proceeding."""

    ACTIVE = "active"
    CLOSED = "closed"
    UNKNOWN = "unknown"


class ProcessingStatus(str, Enum):
    """Processing status of a stored filing.

    - PENDING: recorded but not yet summarised
    - PROCESSED: summary attached (real text or a fallback string)
    - FAILED: summarisation was abandoned for good
    """

    PENDING = "pending"
    PROCESSED = "processed"
    FAILED = "failed"


class FetchStatus(str, Enum):
    OK = "ok"
    RATE_LIMITED = "rate_limited"
    ERROR = "error"


class DocketInfo(BaseModel):
    """Authoritative docket metadata returned by the ECFS proceedings endpoint."""

    docket_number: str
    title: str
    bureau: str | None = Field(default=None)
    description: str | None = Field(default=None)
    status: DocketStatus = Field(default=DocketStatus.UNKNOWN)


class Docket(DocketWatchModel):
    id: int
    docket_number: str
    title: str | None = Field(default=None)
    bureau: str | None = Field(default=None)
    description: str | None = Field(default=None)
    status: DocketStatus = Field(default=DocketStatus.UNKNOWN)


class FilingDraft(BaseModel):
    """Canonical shape of one raw ECFS filing, before the pipeline owns it."""

    fcc_filing_id: str
    title: str
    author: str
    author_organization: str | None = Field(default=None)
    filing_url: str
    document_urls: list[str] = Field(default_factory=list)
    filed_at: datetime | None = Field(default=None)

    @field_validator("filed_at", mode="before")
    @classmethod
    def coerce_filed_at(cls, value: Any) -> datetime | None:
        return ensure_utc(value)


class Filing(FilingDraft):
    id: int | None = Field(default=None)
    docket_id: int
    fetched_at: datetime
    summary: str | None = Field(default=None)
    summary_generated_at: datetime | None = Field(default=None)
    processing_status: ProcessingStatus = Field(default=ProcessingStatus.PENDING)

    @field_validator("fetched_at", "summary_generated_at", mode="before")
    @classmethod
    def coerce_timestamps(cls, value: Any) -> datetime | None:
        return ensure_utc(value)

    @classmethod
    def from_draft(cls, draft: FilingDraft, docket_id: int, **kwargs: Any) -> "Filing":
        return cls(**draft.model_dump(), docket_id=docket_id, **kwargs)


class FilingPage(BaseModel):
    """One page of raw filings for a docket, plus how the fetch went."""

    docket_number: str
    filings: list[dict[str, Any]] = Field(default_factory=list)
    status: FetchStatus = Field(default=FetchStatus.OK)
    http_status: int | None = Field(default=None)
    error: str | None = Field(default=None)

    @property
    def failed(self) -> bool:
        return self.status == FetchStatus.ERROR
