#!/usr/bin/env python3
"""
Point d'entrée : lit PORT depuis l'env et lance uvicorn (companion.main:app).
Un seul worker : la session compagnon (flow calendrier, connexion backend) vit dans le process.
"""
from __future__ import annotations

import os
import sys


def main() -> int:
    port = os.environ.get("PORT", "8000")
    try:
        port_int = int(port)
    except ValueError:
        port_int = 8000
    host = os.environ.get("HOST", "127.0.0.1")
    print(f"Starting companion bridge on {host}:{port_int} (PORT={os.environ.get('PORT', 'not set')})", flush=True)
    # Uvicorn en avant-plan (remplace ce processus)
    os.execvp(
        "uvicorn",
        [
            "uvicorn", "companion.main:app",
            "--host", host,
            "--port", str(port_int),
            "--workers", "1",
        ],
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
