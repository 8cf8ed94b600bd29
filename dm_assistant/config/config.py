import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parents[2] / ".env")

INTENTS = ("SALES_INTENT", "QUESTION", "PERSONAL", "LOW_EFFORT")

# Tenant fallback when a vendor sends no coach id or a malformed one
DEFAULT_COACH_ID = os.getenv("DEFAULT_COACH_ID", "6abbc19a-ef88-4359-9dde-169d247f696f")
DEFAULT_SOURCE_CHANNEL = os.getenv("DEFAULT_SOURCE_CHANNEL", "manychat")

# Conversation
DEFAULT_CTA_THRESHOLD = 3
HISTORY_CAP = 20
PROMPT_HISTORY_TURNS = 10
TOP_PLAN = "premium"
STANDARD_PLANS = ("standard", "premium")

PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "http://localhost:8000").rstrip("/")

# Per-conversation lock (redis)
CONVERSATION_LOCK_ENABLED = os.getenv("CONVERSATION_LOCK_ENABLED", "") == "1"
CONVERSATION_LOCK_TTL = int(os.getenv("CONVERSATION_LOCK_TTL", "30"))
CONVERSATION_LOCK_WAIT = float(os.getenv("CONVERSATION_LOCK_WAIT", "10"))

# Ingestion
CHUNK_SIZE = 1000
CHUNK_OVERLAP = 200
MIN_CHUNK_CHARS = 50
INSERT_BATCH_SIZE = 20
MIN_READABLE_RATIO = 0.35
MIN_EXTRACTED_CHARS = 100
FILE_FETCH_TIMEOUT = float(os.getenv("FILE_FETCH_TIMEOUT", "30"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
