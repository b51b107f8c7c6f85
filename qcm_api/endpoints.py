"""Quiz API endpoints relative to QCM_API_URL."""

QUESTIONS_PATH = "/api/qcm"
CHECK_PATH = "/api/check"

# Default headers sent with every request
DEFAULT_HEADERS = {
    "Accept": "application/json",
}
