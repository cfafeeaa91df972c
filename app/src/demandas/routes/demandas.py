from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Annotated, Any

from fastapi import APIRouter, BackgroundTasks, Body, Depends, HTTPException, Query, Request, status
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from demandas.audit import ACAO_CREATE, ACAO_DELETE, ACAO_UPDATE, AuditRecorder, client_ip, get_audit_recorder, model_to_dict
from demandas.db import get_db
from demandas.errors import bad_request, storage_error
from demandas.models import STATUS_APROVADA, STATUS_REPROVADA
from demandas.schemas import DemandaCreate, demanda_to_dict, primeira_mensagem
from demandas.services.backup import TIPO_DELETE, TIPO_STATUS, BackupExporter, get_backup_exporter
from demandas.services.demandas_service import (
    create_demanda,
    delete_demanda,
    estatisticas,
    get_demanda,
    list_demandas,
    search_demandas,
    update_demanda,
)
from demandas.services.queue import dispatch_backup

router = APIRouter()

TABELA = "demandas"
STATUS_COM_BACKUP = {STATUS_APROVADA, STATUS_REPROVADA}
MAX_PERIODO_DIAS = 36500


def _parse_id(demanda_id: str) -> int:
    try:
        return int(demanda_id)
    except ValueError:
        raise bad_request("ID da demanda invalido")


def _usuario_id(value: Any) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _get_or_404(db: Session, demanda_id: int):
    demanda = get_demanda(db, demanda_id)
    if not demanda:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Demanda nao encontrada")
    return demanda


def _payload_error(exc: ValidationError) -> HTTPException:
    return bad_request(primeira_mensagem(exc))


@router.get("/demandas")
def api_list_demandas(
    db: Annotated[Session, Depends(get_db)],
    status_filter: Annotated[str | None, Query(alias="status")] = None,
    funcionario_id: Annotated[int | None, Query(alias="funcionarioId")] = None,
    categoria: str | None = None,
    prioridade: str | None = None,
    limit: Annotated[int, Query(ge=0)] = 100,
    offset: Annotated[int, Query(ge=0)] = 0,
):
    filters = {
        "status": status_filter,
        "funcionarioId": funcionario_id,
        "categoria": categoria,
        "prioridade": prioridade,
    }
    items = list_demandas(db, filters, limit, offset)
    return {"success": True, "data": [demanda_to_dict(item) for item in items]}


@router.get("/demandas/estatisticas")
def api_estatisticas(
    db: Annotated[Session, Depends(get_db)],
    periodo: Annotated[int, Query(ge=0, le=MAX_PERIODO_DIAS)] = 30,
):
    desde = datetime.now(timezone.utc) - timedelta(days=periodo)
    return {"success": True, "estatisticas": estatisticas(db, desde)}


@router.get("/demandas/search")
def api_search_demandas(
    db: Annotated[Session, Depends(get_db)],
    q: str | None = None,
    limit: Annotated[int, Query(ge=0)] = 20,
):
    items = search_demandas(db, q, limit)
    return {"success": True, "data": [demanda_to_dict(item) for item in items]}


@router.get("/demandas/{demanda_id}")
def api_get_demanda(demanda_id: str, db: Annotated[Session, Depends(get_db)]):
    demanda = _get_or_404(db, _parse_id(demanda_id))
    return {"success": True, "demanda": demanda_to_dict(demanda)}


@router.post("/demandas", status_code=status.HTTP_201_CREATED)
def api_create_demanda(
    request: Request,
    background_tasks: BackgroundTasks,
    db: Annotated[Session, Depends(get_db)],
    audit: Annotated[AuditRecorder, Depends(get_audit_recorder)],
    payload: Annotated[dict[str, Any], Body()],
):
    try:
        DemandaCreate.model_validate(payload)
    except ValidationError as exc:
        raise _payload_error(exc)

    try:
        demanda = create_demanda(db, payload)
    except ValidationError as exc:
        raise _payload_error(exc)
    except SQLAlchemyError as exc:
        db.rollback()
        raise storage_error(exc)

    background_tasks.add_task(
        audit.registrar,
        ACAO_CREATE,
        TABELA,
        demanda.id,
        None,
        model_to_dict(demanda),
        demanda.funcionario_id,
        client_ip(request),
    )
    return {"success": True, "demanda": demanda_to_dict(demanda)}


@router.put("/demandas/{demanda_id}")
def api_update_demanda(
    demanda_id: str,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Annotated[Session, Depends(get_db)],
    audit: Annotated[AuditRecorder, Depends(get_audit_recorder)],
    exporter: Annotated[BackupExporter, Depends(get_backup_exporter)],
    payload: Annotated[dict[str, Any], Body()],
):
    demanda = _get_or_404(db, _parse_id(demanda_id))
    before = model_to_dict(demanda)

    try:
        demanda = update_demanda(db, demanda, payload)
    except ValidationError as exc:
        db.rollback()
        raise _payload_error(exc)
    except SQLAlchemyError as exc:
        db.rollback()
        raise storage_error(exc)

    background_tasks.add_task(
        audit.registrar,
        ACAO_UPDATE,
        TABELA,
        demanda.id,
        before,
        model_to_dict(demanda),
        demanda.atualizado_por,
        client_ip(request),
    )
    if demanda.status in STATUS_COM_BACKUP and demanda.status != before["status"]:
        dispatch_backup(background_tasks, exporter, TIPO_STATUS)
    return {"success": True, "demanda": demanda_to_dict(demanda)}


@router.delete("/demandas/{demanda_id}")
def api_delete_demanda(
    demanda_id: str,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Annotated[Session, Depends(get_db)],
    audit: Annotated[AuditRecorder, Depends(get_audit_recorder)],
    exporter: Annotated[BackupExporter, Depends(get_backup_exporter)],
    usuario_id: Annotated[int | None, Query(alias="usuarioId")] = None,
    payload: Annotated[dict[str, Any] | None, Body()] = None,
):
    demanda = _get_or_404(db, _parse_id(demanda_id))
    usuario_id = _usuario_id((payload or {}).get("usuarioId")) or usuario_id
    before = model_to_dict(demanda)

    exporter.criar_backup_seguro(TIPO_DELETE)
    try:
        delete_demanda(db, demanda)
    except SQLAlchemyError as exc:
        db.rollback()
        raise storage_error(exc)

    background_tasks.add_task(
        audit.registrar,
        ACAO_DELETE,
        TABELA,
        before["id"],
        before,
        None,
        usuario_id,
        client_ip(request),
    )
    return {"success": True}
