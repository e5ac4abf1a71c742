import logging
from typing import Any

from docketwatch.core.exceptions import FilingParsingError
from docketwatch.core.utils import parse_source_datetime
from docketwatch.ecfs.models import DocketInfo, DocketStatus, FilingDraft
from docketwatch.settings import ECFS_DOCUMENT_BASE_URL, ECFS_FILING_PAGE_URL

logger = logging.getLogger(__name__)

DEFAULT_FILING_TITLE = "Filing"
DEFAULT_AUTHOR = "Unknown"


class FilingParser:
    """Turns raw ECFS filing records into FilingDrafts.

    Pure: no I/O, and only a missing ``id_submission`` is treated as an error.
    """

    def __init__(self, document_base_url: str = ECFS_DOCUMENT_BASE_URL):
        self.document_base_url = document_base_url.rstrip("/")

    def parse_content(self, raw: dict[str, Any]) -> FilingDraft:
        filing_id = self._filing_id(raw)

        filed_at = parse_source_datetime(raw.get("date_disseminated"))
        if filed_at is None and raw.get("date_disseminated"):
            logger.warning(
                f"Unparseable date_disseminated for filing {filing_id}: {raw.get('date_disseminated')!r}",
                extra={"filing_id": filing_id},
            )

        return FilingDraft(
            fcc_filing_id=filing_id,
            title=self._title(raw),
            author=self._author(raw),
            author_organization=self._organization(raw),
            filing_url=f"{ECFS_FILING_PAGE_URL}/{filing_id}",
            document_urls=self._document_urls(filing_id, raw),
            filed_at=filed_at,
        )

    def _filing_id(self, raw: dict[str, Any]) -> str:
        filing_id = raw.get("id_submission")
        if filing_id is None or not str(filing_id).strip():
            raise FilingParsingError("Filing record has no id_submission; the ECFS schema may have changed")
        return str(filing_id).strip()

    def _title(self, raw: dict[str, Any]) -> str:
        title = raw.get("brief_comment_text")
        if isinstance(title, str) and title.strip():
            return title.strip()
        return DEFAULT_FILING_TITLE

    def _author(self, raw: dict[str, Any]) -> str:
        filers = raw.get("filers")
        if isinstance(filers, list):
            for filer in filers:
                if isinstance(filer, dict) and _text(filer.get("name")):
                    return _text(filer["name"])
        return _text(raw.get("contact_email")) or DEFAULT_AUTHOR

    def _organization(self, raw: dict[str, Any]) -> str | None:
        return _text(raw.get("lawfirm_name")) or _text(raw.get("organization_name"))

    def _document_urls(self, filing_id: str, raw: dict[str, Any]) -> list[str]:
        urls = []
        attachments = raw.get("attachments")
        if not isinstance(attachments, list):
            return urls
        for attachment in attachments:
            if not isinstance(attachment, dict):
                continue
            file_name = _text(attachment.get("clean_file_name"))
            if file_name:
                urls.append(f"{self.document_base_url}/filing/{filing_id}/download/{file_name}")
        return urls


def _text(value: Any) -> str | None:
    """A stripped string, or None for anything blank or not a string."""
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def parse_docket_info(proceeding: dict[str, Any], docket_number: str) -> DocketInfo:
    """Map an ECFS proceeding record onto DocketInfo."""
    return DocketInfo(
        docket_number=docket_number,
        title=proceeding.get("subject") or "No title available",
        bureau=proceeding.get("bureau_name"),
        description=proceeding.get("subject"),
        status=_docket_status(proceeding.get("status")),
    )


def _docket_status(value: Any) -> DocketStatus:
    if not isinstance(value, str):
        return DocketStatus.UNKNOWN
    lowered = value.strip().lower()
    if lowered in ("open", "active"):
        return DocketStatus.ACTIVE
    if lowered in ("closed", "terminated", "inactive"):
        return DocketStatus.CLOSED
    return DocketStatus.UNKNOWN
