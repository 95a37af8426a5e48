"""
Random identifier generators: pure, side-effect-free functions.

All generators draw from the OS CSPRNG (``uuid4`` and ``secrets`` both use
``os.urandom``), which keeps the "keys never collide" assumption valid.
"""

from __future__ import annotations

import secrets
import uuid


def generate_submission_key() -> str:
    """Return a fresh random UUID4 in canonical hyphenated hex form."""
    return str(uuid.uuid4())


def generate_request_id() -> str:
    """Generate a short request ID for log correlation (``req_`` + 12 hex)."""
    return f"req_{secrets.token_hex(6)}"
