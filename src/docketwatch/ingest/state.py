"""Per-filing progress states and the run summary.

A filing moves through tagged states during a run:

    Discovered -> Normalized -> Skipped                      (already stored)
                             -> Summarized -> Stored         (new filing)
    any state  -> Abandoned(reason)                          (filing-level error)

Skipped, Stored and Abandoned are terminal. Every transition is recorded on the
RunSummary so callers and tests can see exactly what happened to each filing.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field, computed_field

from docketwatch.core.utils import utc_now
from docketwatch.ecfs.models import Filing, FilingDraft


class FilingStage(str, Enum):
    DISCOVERED = "discovered"
    NORMALIZED = "normalized"
    SKIPPED = "skipped"
    SUMMARIZED = "summarized"
    STORED = "stored"
    ABANDONED = "abandoned"


TERMINAL_STAGES = {FilingStage.SKIPPED, FilingStage.STORED, FilingStage.ABANDONED}


class Discovered(BaseModel):
    stage: Literal[FilingStage.DISCOVERED] = FilingStage.DISCOVERED
    docket_number: str
    raw: dict[str, Any]

    @property
    def filing_id(self) -> str | None:
        value = self.raw.get("id_submission")
        return str(value).strip() if value is not None else None


class Normalized(BaseModel):
    stage: Literal[FilingStage.NORMALIZED] = FilingStage.NORMALIZED
    draft: FilingDraft

    @property
    def filing_id(self) -> str:
        return self.draft.fcc_filing_id


class Skipped(BaseModel):
    stage: Literal[FilingStage.SKIPPED] = FilingStage.SKIPPED
    filing_id: str


class Summarized(BaseModel):
    stage: Literal[FilingStage.SUMMARIZED] = FilingStage.SUMMARIZED
    draft: FilingDraft
    summary: str

    @property
    def filing_id(self) -> str:
        return self.draft.fcc_filing_id


class Stored(BaseModel):
    stage: Literal[FilingStage.STORED] = FilingStage.STORED
    filing: Filing

    @property
    def filing_id(self) -> str:
        return self.filing.fcc_filing_id


class Abandoned(BaseModel):
    stage: Literal[FilingStage.ABANDONED] = FilingStage.ABANDONED
    filing_id: str | None = None
    reason: str


class RunError(BaseModel):
    """One error recorded during a run, tagged with where it was recovered."""

    scope: Literal["docket", "filing", "run"]
    message: str
    docket_number: str | None = None
    filing_id: str | None = None


class RunSummary(BaseModel):
    """Counts and errors for one ingestion run."""

    dockets_considered: int = 0
    filings_discovered: int = 0
    filings_stored: int = 0
    filings_skipped: int = 0
    errors: list[RunError] = Field(default_factory=list)
    started_at: datetime = Field(default_factory=utc_now)
    finished_at: datetime | None = None
    duration_seconds: float | None = None
    timed_out: bool = False
    # fcc_filing_id (or a positional key when the id is missing) -> stages in order
    transitions: dict[str, list[FilingStage]] = Field(default_factory=dict)

    @computed_field
    @property
    def processed(self) -> int:
        return self.filings_stored

    def record(self, key: str, state: BaseModel, docket_number: str | None = None) -> None:
        self.transitions.setdefault(key, []).append(state.stage)

        if state.stage == FilingStage.DISCOVERED:
            self.filings_discovered += 1
        elif state.stage == FilingStage.SKIPPED:
            self.filings_skipped += 1
        elif state.stage == FilingStage.STORED:
            self.filings_stored += 1
        elif state.stage == FilingStage.ABANDONED:
            self.add_error(
                "filing",
                state.reason,
                docket_number=docket_number,
                filing_id=state.filing_id,
            )

    def add_error(
        self,
        scope: Literal["docket", "filing", "run"],
        message: str,
        docket_number: str | None = None,
        filing_id: str | None = None,
    ) -> RunError:
        error = RunError(
            scope=scope, message=message, docket_number=docket_number, filing_id=filing_id
        )
        self.errors.append(error)
        return error

    def errors_for(self, scope: str) -> list[RunError]:
        return [e for e in self.errors if e.scope == scope]

    def finish(self) -> "RunSummary":
        self.finished_at = utc_now()
        self.duration_seconds = round((self.finished_at - self.started_at).total_seconds(), 3)
        return self

    def log_line(self) -> str:
        return (
            f"{self.dockets_considered} dockets, {self.filings_discovered} discovered, "
            f"{self.filings_stored} stored, {self.filings_skipped} skipped, "
            f"{len(self.errors)} errors"
        )
