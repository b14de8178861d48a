"""Signed access tokens and opaque refresh secrets."""
