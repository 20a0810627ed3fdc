# companion/utils/log_mask.py
from __future__ import annotations

import re


def mask_for_log(text: str, max_len: int = 50) -> str:
    """Masque email / numéros dans les logs et tronque (le texte vient de l'utilisateur)."""
    if not text or not isinstance(text, str):
        return ""
    t = text.strip()[:max_len]
    t = re.sub(r"\S+@\S+\.\S+", "[EMAIL]", t)
    # Séquences 8+ chiffres (téléphone) ; heures et durées courtes restent lisibles
    t = re.sub(r"\d[\d\s\-\.]{7,}", "[TEL]", t)
    return t
