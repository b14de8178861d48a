"""Refresh token lifecycle (issue, verify, revoke, session cap)."""
