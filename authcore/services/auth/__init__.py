"""Session orchestration: start, refresh with rotation, sign-out."""
