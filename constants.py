"""Shared constants for the document Q&A client."""

DEFAULT_API_URL = "http://localhost:8000"
CLIENT_VERSION = "0.3.0"

DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_MAX_RETRIES = 3
DEFAULT_INITIAL_DELAY = 1.0
DEFAULT_MAX_DELAY = 60.0
DEFAULT_EXPONENTIAL_BASE = 2.0

MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB
ALLOWED_EXTENSIONS = (".pdf", ".txt", ".md", ".docx")
ALLOWED_MIME_TYPES = (
    "application/pdf",
    "text/plain",
    "text/markdown",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
)

UNKNOWN_ERROR = "Unknown error"
BACKEND_UNAVAILABLE = "Backend is not available"
