from __future__ import annotations

from demandas.services.backup import get_backup_exporter


def run_backup_job(tipo: str) -> str:
    return get_backup_exporter().criar_backup(tipo)
