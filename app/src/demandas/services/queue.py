from __future__ import annotations

import logging

from fastapi import BackgroundTasks
from redis import Redis
from redis.exceptions import RedisError
from rq import Queue

from demandas.services.backup import BackupExporter
from demandas.settings import settings

logger = logging.getLogger(__name__)


def get_queue() -> Queue:
    return Queue("backups", connection=Redis.from_url(settings.REDIS_URL))


def enqueue_backup(tipo: str):
    from demandas.workers.backup_worker import run_backup_job

    return get_queue().enqueue(run_backup_job, tipo, job_timeout=600)


def dispatch_backup(background_tasks: BackgroundTasks, exporter: BackupExporter, tipo: str) -> None:
    """Runs a backup off the request path; the caller never sees its outcome."""
    if settings.TASK_QUEUE_BACKEND == "rq":
        try:
            enqueue_backup(tipo)
        except RedisError:
            logger.exception("Nao foi possivel enfileirar backup %s", tipo)
        return
    background_tasks.add_task(exporter.criar_backup_seguro, tipo)
