"""Generate AI summaries for FCC filings from their attached documents."""

import asyncio
import logging

from openai import AsyncAzureOpenAI, AsyncOpenAI

from docketwatch.settings import (
    AZURE_OPENAI_API_KEY,
    AZURE_OPENAI_API_VERSION,
    AZURE_OPENAI_ENDPOINT,
    OPENAI_API_KEY,
    OPENAI_BASE_URL,
    SUMMARY_MAX_DOCUMENTS,
    SUMMARY_MODEL,
    SUMMARY_TIMEOUT_SECONDS,
)

logger = logging.getLogger(__name__)

NO_DOCUMENT_SUMMARY = "No document available for summarization."
SUMMARY_UNAVAILABLE = "Summary could not be generated - please check original filing."
# Some models answer with this instead of an error when they cannot read the file
PROCESSING_FAILED_MARKER = "Document processing failed."

FILING_SUMMARY_PROMPT = """Analyze this FCC filing document and provide a 2-4 sentence summary that:
1. Identifies the key regulatory issue or request
2. States the filer's position or requested action
3. Notes any deadlines or procedural requirements
4. Avoids technical jargon for general audiences

Filing title: {title}
Document URL: {url}

Please provide only the summary, no additional commentary."""

# OpenAI client (lazy loaded)
_openai_client: AsyncOpenAI | None = None


def get_openai_client() -> AsyncOpenAI:
    """Lazy load the async OpenAI client (Azure when an endpoint is configured)."""
    global _openai_client
    if _openai_client is None:
        if AZURE_OPENAI_ENDPOINT:
            _openai_client = AsyncAzureOpenAI(
                api_key=AZURE_OPENAI_API_KEY,
                api_version=AZURE_OPENAI_API_VERSION,
                azure_endpoint=AZURE_OPENAI_ENDPOINT,
                max_retries=0,
            )
            logger.info("Azure OpenAI client initialised for filing summary generation")
        else:
            _openai_client = AsyncOpenAI(
                api_key=OPENAI_API_KEY,
                base_url=OPENAI_BASE_URL,
                max_retries=0,
            )
            logger.info("OpenAI client initialised for filing summary generation")
    return _openai_client


class SummaryGenerator:
    """Summarises a filing from the first documents that can be read.

    ``summarize`` never raises: it returns a real summary, NO_DOCUMENT_SUMMARY
    when there is nothing to read, or SUMMARY_UNAVAILABLE when every attempt
    failed.
    """

    def __init__(
        self,
        client: AsyncOpenAI | None = None,
        model: str = SUMMARY_MODEL,
        timeout: float = SUMMARY_TIMEOUT_SECONDS,
        max_documents: int = SUMMARY_MAX_DOCUMENTS,
    ):
        self._client = client
        self.model = model
        self.timeout = timeout
        self.max_documents = max_documents

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = get_openai_client()
        return self._client

    async def summarize(self, document_urls: list[str], filing_title: str) -> str:
        if not document_urls:
            return NO_DOCUMENT_SUMMARY

        for url in document_urls[: self.max_documents]:
            try:
                summary = await asyncio.wait_for(
                    self._summarize_document(url, filing_title), timeout=self.timeout
                )
            except asyncio.TimeoutError:
                logger.warning(f"Summary request timed out after {self.timeout}s for {url}")
                continue
            except Exception as e:
                logger.warning(
                    f"Failed to process document {url}: {e}",
                    extra={"document_url": url, "error_type": type(e).__name__},
                )
                continue

            if summary and summary != PROCESSING_FAILED_MARKER:
                logger.info(f"Generated summary for '{filing_title}' from {url}")
                return summary

            logger.info(f"Empty or failed summary for {url}, trying next document")

        return SUMMARY_UNAVAILABLE

    async def _summarize_document(self, url: str, filing_title: str) -> str:
        prompt = FILING_SUMMARY_PROMPT.format(title=filing_title, url=url)

        response = await self.client.responses.create(
            model=self.model,
            input=[
                {
                    "role": "user",
                    "content": [
                        {"type": "input_file", "file_url": url},
                        {"type": "input_text", "text": prompt},
                    ],
                }
            ],
            timeout=self.timeout,
        )

        return (response.output_text or "").strip()

    async def aclose(self) -> None:
        if self._client is not None and self._client is not _openai_client:
            await self._client.close()
