from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT / "app" / "src"))

from demandas.db import SessionLocal, init_db
from demandas.settings import settings
from demandas.services.demandas_service import restore_demandas


def load_json(path: Path):
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def latest_backup(directory: Path) -> Path | None:
    files = sorted(directory.glob("backup_*.json"), key=lambda item: item.stat().st_mtime)
    return files[-1] if files else None


def main() -> int:
    parser = argparse.ArgumentParser(description="Restaura demandas a partir de um arquivo de backup.")
    parser.add_argument(
        "--path",
        default=None,
        help="Arquivo de backup. Padrao: o mais recente em BACKUP_DIR.",
    )
    args = parser.parse_args()

    target = Path(args.path) if args.path else latest_backup(Path(settings.BACKUP_DIR))
    if not target or not target.is_file():
        print(f"Backup nao encontrado: {target or settings.BACKUP_DIR}")
        return 1

    try:
        payload = load_json(target)
    except (OSError, json.JSONDecodeError) as exc:
        print(f"Erro lendo {target}: {exc}")
        return 1

    entries = payload.get("demandas") if isinstance(payload, dict) else payload
    if not isinstance(entries, list):
        print("Formato invalido: esperado objeto com 'demandas' ou lista.")
        return 1

    init_db()
    db = SessionLocal()
    try:
        result = restore_demandas(db, entries)
    finally:
        db.close()

    print(f"{target.name}: {result.restauradas} demandas restauradas, {result.erros} erros.")
    for message in result.mensagens:
        print(f"  {message}")
    return 0 if result.erros == 0 else 2


if __name__ == "__main__":
    raise SystemExit(main())
