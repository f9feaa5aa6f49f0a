"""b2bvendas - B2B marketplace API.

Suppliers (fornecedores) publish catalogs, manage customers (clientes), price
lists and orders; customers place orders with the suppliers they are
associated with.

Architecture Overview:
- **API Layer**: FastAPI routers, middleware and request/response schemas
- **Core Layer**: Configuration, errors, logging, tracing and security helpers
- **Domain Layer**: Entities, repositories and services per business context
- **Infrastructure Layer**: Database access and the email delivery queue
"""
