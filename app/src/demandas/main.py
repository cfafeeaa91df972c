from __future__ import annotations

import json
import logging
import os
import resource
import time
from datetime import datetime, timezone
from typing import Annotated

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from demandas import __version__
from demandas.audit import client_ip
from demandas.db import SessionLocal, get_db, init_db
from demandas.errors import register_exception_handlers
from demandas.routes.backup import router as backup_router
from demandas.routes.demandas import router as demandas_router
from demandas.routes.feedbacks import router as feedbacks_router
from demandas.routes.usuarios import router as usuarios_router
from demandas.services.backup import get_backup_exporter
from demandas.services.demandas_service import count_demandas
from demandas.services.scheduler import BackupScheduler
from demandas.services.usuarios_service import seed_usuarios
from demandas.settings import settings

STARTED_AT = time.monotonic()

logger = logging.getLogger(__name__)


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=True)


def setup_logging():
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(settings.LOG_LEVEL)


setup_logging()

app = FastAPI(title="Portal de Demandas", version=__version__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
    allow_credentials=True,
)

register_exception_handlers(app)

app.include_router(demandas_router, prefix="/api")
app.include_router(usuarios_router, prefix="/api")
app.include_router(feedbacks_router, prefix="/api")
app.include_router(backup_router, prefix="/api")


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    logger.info(
        "%s %s %s - IP: %s (%.1fms)",
        request.method,
        request.url.path,
        response.status_code,
        client_ip(request),
        (time.perf_counter() - started) * 1000,
    )
    return response


def memory_stats() -> dict[str, int]:
    usage = resource.getrusage(resource.RUSAGE_SELF)
    return {"max_rss_kb": usage.ru_maxrss, "pid": os.getpid()}


@app.get("/health")
def health(db: Annotated[Session, Depends(get_db)]):
    timestamp = datetime.now(timezone.utc).isoformat()
    try:
        total = count_demandas(db)
    except SQLAlchemyError as exc:
        logger.error("Erro no health check: %s", exc)
        return JSONResponse(status_code=500, content={"status": "ERROR", "error": str(exc), "timestamp": timestamp})
    return {
        "status": "OK",
        "demandas": total,
        "uptime": round(time.monotonic() - STARTED_AT, 3),
        "timestamp": timestamp,
        "memory": memory_stats(),
        "version": __version__,
    }


@app.on_event("startup")
def startup_init() -> None:
    init_db()
    if settings.SEED_USERS_ON_STARTUP:
        db = SessionLocal()
        try:
            seed_usuarios(db)
        finally:
            db.close()

    exporter = get_backup_exporter()
    logger.info("Diretorio de backups: %s", exporter.directory.resolve())
    if settings.BACKUP_SCHEDULER_ENABLED:
        scheduler = BackupScheduler(
            exporter,
            settings.BACKUP_INTERVAL_SECONDS,
            settings.BACKUP_CLEANUP_INTERVAL_SECONDS,
        )
        scheduler.start()
        app.state.backup_scheduler = scheduler
    logger.info("Ambiente: %s", settings.ENVIRONMENT)


@app.on_event("shutdown")
def shutdown_scheduler() -> None:
    scheduler = getattr(app.state, "backup_scheduler", None)
    if scheduler is not None:
        scheduler.stop()
