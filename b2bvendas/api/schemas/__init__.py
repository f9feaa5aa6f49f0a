"""Pydantic schemas for API requests and responses.

Request models accept camelCase JSON (``razaoSocial``) and expose snake_case
attributes; response models serialize back to camelCase.
"""
