from __future__ import annotations

import sys
from pathlib import Path

root = Path(__file__).resolve().parents[1]
sys.path.append(str(root / "src"))

from demandas.db import SessionLocal, init_db
from demandas.services.usuarios_service import seed_usuarios


def main():
    init_db()
    db = SessionLocal()
    try:
        criados = seed_usuarios(db)
        if criados:
            print(f"{criados} usuarios criados.")
        else:
            print("Usuarios padrao ja existem.")
    finally:
        db.close()


if __name__ == "__main__":
    main()
