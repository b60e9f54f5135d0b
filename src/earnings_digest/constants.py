"""
Project-wide constants for the earnings digest service
"""  # noqa: D200, D212, D415

# ==============================================================================
# Request Configuration
# ==============================================================================

# The only tool selector the analyze endpoint accepts
TOOL_EARNINGS_SUMMARY = "earnings_summary"

# ==============================================================================
# Upload and Extraction Limits
# ==============================================================================

_MB = 1024 * 1024

MAX_UPLOAD_BYTES = 20 * _MB  # Server-side hard cap

# Allowance for multipart boundaries and form fields around the file body
MULTIPART_OVERHEAD_BYTES = 64 * 1024

PDF_MIME_TYPE = "application/pdf"
PDF_SUFFIX = ".pdf"
DEFAULT_MIME_TYPE = "application/octet-stream"

# Below this many extracted characters a PDF is treated as scanned
SCANNED_TEXT_THRESHOLD = 500

# ==============================================================================
# Prompt Configuration
# ==============================================================================

MAX_PROMPT_CHARS = 40_000  # Prefix kept from the transcript text
LOG_PREVIEW_CHARS = 200

# ==============================================================================
# Model Configuration
# ==============================================================================

DEFAULT_MODEL = "gemini-2.5-flash"
REQUEST_TIMEOUT_SECONDS = 60.0
RESPONSE_MIME_TYPE = "application/json"
