"""Infrastructure layer: database access and email delivery.

- **database**: Async SQLAlchemy engine, sessions and the generic repository
- **email**: Delivery transport and the in-process retrying queue
"""
