"""Webhook-driven access code issuance."""
