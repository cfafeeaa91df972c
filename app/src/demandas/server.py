"""Process entry point.

SIGINT takes one ``shutdown`` backup before exiting, SIGTERM exits without
one, and an uncaught exception on any thread takes a ``crash`` backup and
forces the process down with status 1.
"""

from __future__ import annotations

import logging
import os
import signal
import sys
import threading

import uvicorn

from demandas.services.backup import TIPO_CRASH, TIPO_SHUTDOWN, BackupExporter, get_backup_exporter
from demandas.settings import settings

logger = logging.getLogger(__name__)


class DemandasServer(uvicorn.Server):
    def __init__(self, config: uvicorn.Config):
        super().__init__(config)
        self.exit_signal: int | None = None

    def handle_exit(self, sig: int, frame) -> None:
        if self.exit_signal is None:
            self.exit_signal = sig
        super().handle_exit(sig, frame)


def install_crash_hooks(exporter: BackupExporter) -> None:
    def crash(exc_type, exc, tb) -> None:
        logger.critical("Excecao nao capturada", exc_info=(exc_type, exc, tb))
        exporter.criar_backup_seguro(TIPO_CRASH)
        for handler in logging.getLogger().handlers:
            handler.flush()
        os._exit(1)

    def thread_crash(args: threading.ExceptHookArgs) -> None:
        crash(args.exc_type, args.exc_value, args.exc_traceback)

    sys.excepthook = crash
    threading.excepthook = thread_crash


def shutdown_backup(exporter: BackupExporter) -> None:
    logger.info("Recebido SIGINT. Criando backup final...")
    filename = exporter.criar_backup_seguro(TIPO_SHUTDOWN)
    if filename:
        logger.info("Backup final criado: %s", filename)
    logger.info("Encerrando servidor...")


def main() -> int:
    config = uvicorn.Config(
        "demandas.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_config=None,
    )
    server = DemandasServer(config)
    exporter = get_backup_exporter()
    install_crash_hooks(exporter)

    try:
        server.run()
    except KeyboardInterrupt:
        server.exit_signal = signal.SIGINT

    if server.exit_signal == signal.SIGINT:
        shutdown_backup(exporter)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
