"""Opaque tracking identifiers."""

from uuid import uuid4


def generate_tracking_id() -> str:
    """Mint a random UUID4 string (122 random bits from the OS CSPRNG)."""
    return str(uuid4())
