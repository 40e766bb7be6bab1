"""Login, session tokens and per-request session verification."""
