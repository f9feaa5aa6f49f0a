"""HTTP API layer of the B2B Vendas platform.

Key components:
- **main**: Application factory and lifecycle management
- **middleware**: Cross-cutting concerns for all requests
  - Security headers and correlation ID tracking
  - Request logging with timing
  - Session authorization per route prefix and role
  - Centralized error handling with the ``{error, code, details}`` envelope
- **routes**: Routers for auth, catalog, customers, orders, email and health
- **schemas**: Pydantic models with camelCase aliases for requests and responses
- **utils**: Response envelopes and orjson serialization
"""
