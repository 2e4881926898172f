from __future__ import annotations

import uuid


def new_id() -> str:
    """Primary keys are application-generated UUID4 strings."""
    return str(uuid.uuid4())
