import os

from dotenv import load_dotenv

# Settings are read at import time, so the .env file has to be loaded first
load_dotenv()

# FCC ECFS public API
FCC_API_KEY = os.environ.get("FCC_API_KEY", "DEMO_KEY")
ECFS_API_BASE_URL = os.environ.get("ECFS_API_BASE_URL", "https://publicapi.fcc.gov/ecfs")
ECFS_DOCUMENT_BASE_URL = os.environ.get("ECFS_DOCUMENT_BASE_URL", "https://ecfs.fcc.gov/api")
ECFS_FILING_PAGE_URL = "https://www.fcc.gov/ecfs/filing"
ECFS_PAGE_SIZE = int(os.environ.get("ECFS_PAGE_SIZE", "250"))
ECFS_TIMEOUT_SECONDS = float(os.environ.get("ECFS_TIMEOUT_SECONDS", "30"))
# Filings are never retried inside a run; the next scheduled run is the backoff
ECFS_MAX_RETRIES = int(os.environ.get("ECFS_MAX_RETRIES", "0"))
USER_AGENT = os.environ.get("DOCKETWATCH_USER_AGENT", "docketwatch/0.1 (+https://www.fcc.gov/ecfs)")

# Summarisation (OpenAI Responses API, or Azure OpenAI when an endpoint is set)
OPENAI_API_KEY = os.environ.get("OPENAI_API_KEY")
OPENAI_BASE_URL = os.environ.get("OPENAI_BASE_URL")
AZURE_OPENAI_ENDPOINT = os.environ.get("AZURE_OPENAI_ENDPOINT")
AZURE_OPENAI_API_KEY = os.environ.get("AZURE_OPENAI_API_KEY")
AZURE_OPENAI_API_VERSION = os.environ.get("AZURE_OPENAI_API_VERSION", "2025-03-01-preview")
SUMMARY_MODEL = os.environ.get("SUMMARY_MODEL", "gpt-4.1-mini")
SUMMARY_TIMEOUT_SECONDS = float(os.environ.get("SUMMARY_TIMEOUT_SECONDS", "30"))
SUMMARY_MAX_DOCUMENTS = int(os.environ.get("SUMMARY_MAX_DOCUMENTS", "2"))

# Docket store
DOCKET_STORE_BACKEND = os.environ.get("DOCKET_STORE_BACKEND", "sqlite").lower()
DATABASE_PATH = os.environ.get("DATABASE_PATH", os.path.join(os.getcwd(), "data", "docketwatch.db"))

# Ingestion pacing and scheduling
INGEST_FILING_DELAY_SECONDS = float(os.environ.get("INGEST_FILING_DELAY_SECONDS", "1.0"))
INGEST_DOCKET_DELAY_SECONDS = float(os.environ.get("INGEST_DOCKET_DELAY_SECONDS", "2.0"))
INGEST_INTERVAL_MINUTES = float(os.environ.get("INGEST_INTERVAL_MINUTES", "15"))
# Unset means the deadline is derived from the number of watched dockets
INGEST_RUN_TIMEOUT_SECONDS = (
    float(os.environ["INGEST_RUN_TIMEOUT_SECONDS"])
    if os.environ.get("INGEST_RUN_TIMEOUT_SECONDS")
    else None
)
REFRESH_DOCKET_METADATA = os.environ.get("REFRESH_DOCKET_METADATA", "true").lower() == "true"

# Subscriptions
FREE_TIER_DOCKET_LIMIT = int(os.environ.get("FREE_TIER_DOCKET_LIMIT", "1"))
SUBSCRIPTION_TIERS = ["free", "pro"]

PLACEHOLDER_DOCKET_TITLE = "Pending - Will be updated from FCC API"
PLACEHOLDER_DOCKET_BUREAU = "Unknown"
PLACEHOLDER_DOCKET_DESCRIPTION = "Docket information will be fetched from FCC API"
