"""Core package for functionality shared by every layer.

- **config**: Settings loaded from the environment
- **context**: Request context and correlation IDs
- **exceptions**: Error hierarchy with HTTP status and error codes
- **error_context**: Redaction of sensitive data before logging
- **logging**: Loguru setup and formatters
- **observability**: OpenTelemetry tracing
- **security**: Password hashing and session tokens
- **text**: Slugs, document normalization and order numbers
"""
