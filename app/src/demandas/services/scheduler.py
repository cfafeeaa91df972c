from __future__ import annotations

import logging
import threading
from typing import Callable

from demandas.services.backup import TIPO_AUTO, BackupExporter

logger = logging.getLogger(__name__)


class BackupScheduler:
    """Periodic automatic backups plus the retention sweep, each on a daemon thread."""

    def __init__(self, exporter: BackupExporter, interval_seconds: float, cleanup_interval_seconds: float):
        self.exporter = exporter
        self.interval_seconds = interval_seconds
        self.cleanup_interval_seconds = cleanup_interval_seconds
        self._stop = threading.Event()
        self._threads: list[threading.Thread] = []

    @property
    def running(self) -> bool:
        return any(thread.is_alive() for thread in self._threads)

    def _loop(self, interval: float, job: Callable[[], object], name: str) -> None:
        while not self._stop.wait(interval):
            try:
                job()
            except Exception:
                logger.exception("Falha na tarefa agendada %s", name)

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        jobs = (
            ("backup-auto", self.interval_seconds, lambda: self.exporter.criar_backup_seguro(TIPO_AUTO)),
            ("backup-cleanup", self.cleanup_interval_seconds, self.exporter.limpar_backups_antigos),
        )
        self._threads = [
            threading.Thread(target=self._loop, args=(interval, job, name), name=name, daemon=True)
            for name, interval, job in jobs
        ]
        for thread in self._threads:
            thread.start()
        logger.info(
            "Backups automaticos a cada %ss, limpeza a cada %ss",
            self.interval_seconds,
            self.cleanup_interval_seconds,
        )

    def stop(self, timeout: float | None = 5.0) -> None:
        self._stop.set()
        for thread in self._threads:
            thread.join(timeout)
        self._threads = []
