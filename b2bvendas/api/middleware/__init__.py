"""Middleware for cross-cutting request/response concerns.

- **SecurityHeadersMiddleware**: security headers (HSTS, X-Frame-Options, etc.)
- **RequestContextMiddleware**: correlation IDs and request context
- **RequestLoggingMiddleware**: structured request logging with timings
- **RateLimitMiddleware**: per client IP request limiting (429 on excess)
- **SessionAuthMiddleware**: session decoding and role gating by path prefix
- **error_handler**: exception handlers producing the JSON error envelope

Registration order in ``create_app`` (outermost first):
1. Security headers
2. Request context
3. Request logging
4. Rate limiting
5. Session authorization
"""
