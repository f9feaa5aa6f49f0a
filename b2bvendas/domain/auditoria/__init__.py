"""Audit trail of authentication and security events."""
