from __future__ import annotations

import json
import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable

from sqlalchemy import select
from sqlalchemy.orm import Session

from demandas.models import Demanda
from demandas.schemas import demanda_to_dict
from demandas.settings import settings

logger = logging.getLogger(__name__)

BACKUP_VERSION = "1.0.0"
TIPO_AUTO = "auto"
TIPO_MANUAL = "manual"
TIPO_STATUS = "status_change"
TIPO_DELETE = "delete"
TIPO_SHUTDOWN = "shutdown"
TIPO_CRASH = "crash"


def safe_tipo(tipo: str | None) -> str:
    tipo = (tipo or TIPO_AUTO).strip()
    tipo = re.sub(r"[^A-Za-z0-9_-]", "_", tipo)
    return tipo or TIPO_AUTO


def timestamp_arquivo(moment: datetime) -> str:
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z").replace(":", "-").replace(".", "-")


class BackupExporter:
    def __init__(
        self,
        session_factory: Callable[[], Session],
        directory: str | Path,
        retention: int = 10,
    ):
        self.session_factory = session_factory
        self.directory = Path(directory)
        self.retention = retention
        self.directory.mkdir(parents=True, exist_ok=True)

    def montar_backup(self, tipo: str | None = None) -> dict[str, Any]:
        db = self.session_factory()
        try:
            rows = db.execute(select(Demanda).order_by(Demanda.id)).scalars().all()
            demandas = [demanda_to_dict(row) for row in rows]
        finally:
            db.close()

        payload: dict[str, Any] = {
            "versao": BACKUP_VERSION,
            "data": datetime.now(timezone.utc).isoformat(),
        }
        if tipo:
            payload["tipo"] = tipo
        payload["totalDemandas"] = len(demandas)
        payload["demandas"] = demandas
        return payload

    def criar_backup(self, tipo: str = TIPO_AUTO) -> str:
        tipo = safe_tipo(tipo)
        filename = f"backup_{tipo}_{timestamp_arquivo(datetime.now(timezone.utc))}.json"
        payload = self.montar_backup(tipo)
        destination = self.directory / filename
        with destination.open("w", encoding="utf-8") as handle:
            json.dump(payload, handle, ensure_ascii=False, indent=2)
        logger.info("Backup %s criado: %s (%s demandas)", tipo, filename, payload["totalDemandas"])
        return filename

    def criar_backup_seguro(self, tipo: str = TIPO_AUTO) -> str | None:
        try:
            return self.criar_backup(tipo)
        except Exception:
            logger.exception("Erro ao criar backup %s", tipo)
            return None

    def limpar_backups_antigos(self) -> list[str]:
        """Keeps the newest ``retention`` automatic backups; other kinds are never removed."""
        arquivos = sorted(path.name for path in self.directory.glob(f"backup_{TIPO_AUTO}_*.json"))
        excedentes = arquivos[: max(len(arquivos) - self.retention, 0)]
        removidos: list[str] = []
        for name in excedentes:
            try:
                (self.directory / name).unlink()
            except OSError:
                logger.exception("Erro ao remover backup antigo %s", name)
                continue
            removidos.append(name)
        if removidos:
            logger.info("%s backups automaticos antigos removidos", len(removidos))
        return removidos


_exporter: BackupExporter | None = None


def get_backup_exporter() -> BackupExporter:
    global _exporter
    if _exporter is None:
        from demandas.db import SessionLocal

        _exporter = BackupExporter(SessionLocal, settings.BACKUP_DIR, settings.BACKUP_RETENTION)
    return _exporter
