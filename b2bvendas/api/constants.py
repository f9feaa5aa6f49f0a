"""API-related constants."""

# HTTP Headers
CORRELATION_ID_HEADER = "X-Correlation-ID"
REQUEST_ID_HEADER = "X-Request-ID"

# Request handling
API_PREFIX = "/api"
CALLBACK_URL_PARAM = "callbackUrl"

# Security
DEFAULT_HSTS_MAX_AGE = 31536000  # 1 year in seconds

# Rate limiting
RATE_LIMIT_LIMIT_HEADER = "X-RateLimit-Limit"
RATE_LIMIT_REMAINING_HEADER = "X-RateLimit-Remaining"
RATE_LIMIT_RESET_HEADER = "X-RateLimit-Reset"
