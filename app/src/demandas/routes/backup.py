from __future__ import annotations

import json
import logging
import time
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, HTTPException, Response, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from demandas.db import get_db
from demandas.errors import bad_request, storage_error
from demandas.services.backup import TIPO_MANUAL, BackupExporter, get_backup_exporter
from demandas.services.demandas_service import restore_demandas

logger = logging.getLogger(__name__)

router = APIRouter()

MAX_ERROS_RESPOSTA = 10


@router.post("/backup")
def api_create_backup(
    exporter: Annotated[BackupExporter, Depends(get_backup_exporter)],
    payload: Annotated[dict[str, Any] | None, Body()] = None,
):
    tipo = (payload or {}).get("tipo") or TIPO_MANUAL
    try:
        filename = exporter.criar_backup(str(tipo))
    except (OSError, SQLAlchemyError) as exc:
        logger.exception("Erro ao criar backup %s", tipo)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "Erro ao criar backup", "details": str(exc)},
        )
    return {"success": True, "message": "Backup criado com sucesso", "filename": filename}


@router.get("/backup")
def api_download_backup(exporter: Annotated[BackupExporter, Depends(get_backup_exporter)]):
    try:
        payload = exporter.montar_backup()
    except SQLAlchemyError as exc:
        raise storage_error(exc)
    return Response(
        content=json.dumps(payload, ensure_ascii=False, indent=2),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="backup_{int(time.time() * 1000)}.json"'},
    )


@router.post("/restore")
def api_restore(
    db: Annotated[Session, Depends(get_db)],
    payload: Annotated[dict[str, Any], Body()],
):
    entries = payload.get("demandas")
    if not isinstance(entries, list):
        raise bad_request("Formato invalido")

    result = restore_demandas(db, entries)
    logger.info("Restauracao: %s restauradas, %s erros", result.restauradas, result.erros)
    response: dict[str, Any] = {
        "success": True,
        "message": f"Restauracao concluida. {result.restauradas} demandas restauradas, {result.erros} erros.",
        "restauradas": result.restauradas,
        "erros": result.erros,
    }
    if result.mensagens:
        response["errors"] = result.mensagens[:MAX_ERROS_RESPOSTA]
    return response
