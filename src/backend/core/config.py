"""Configuration and environment variables for the API process."""

import os

# Bearer token required by admin endpoints; unset leaves them open (local development)
ADMIN_API_KEY = os.getenv("ADMIN_API_KEY")

# Run the ingestion timer inside the API process
ENABLE_SCHEDULER = os.getenv("ENABLE_SCHEDULER", "false").lower() == "true"
