"""Core application constants."""

# Time constants
MILLISECONDS_PER_SECOND = 1000
SECONDS_PER_DAY = 86400

# Security and redaction
REDACTED = "[REDACTED]"

# Brazilian document and address formats
CNPJ_LENGTH = 14
CEP_LENGTH = 8
UF_LENGTH = 2
ORDER_NUMBER_PREFIX = "PED"
