"""Seed knowledge buffer: Ghana facilities, medical deserts and audit events."""
