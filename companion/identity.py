# companion/identity.py
from __future__ import annotations

import uuid


def new_opaque_id() -> str:
    """Identifiant joueur unique par session, ex. {0F8FAD5B-D9CB-469F-A165-70867728950E}."""
    return "{" + str(uuid.uuid4()).upper() + "}"
