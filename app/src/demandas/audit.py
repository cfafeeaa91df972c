from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Callable

from sqlalchemy.orm import Session

from demandas.models import Auditoria

logger = logging.getLogger(__name__)

ACAO_CREATE = "CREATE"
ACAO_UPDATE = "UPDATE"
ACAO_DELETE = "DELETE"


def _normalize_value(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def model_to_dict(model) -> dict[str, Any]:
    data: dict[str, Any] = {}
    for column in model.__table__.columns:
        value = getattr(model, column.name)
        data[column.name] = _normalize_value(value)
    return data


def client_ip(request) -> str | None:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


def _snapshot(value: dict[str, Any] | None) -> dict[str, Any]:
    if not value:
        return {}
    return {key: _normalize_value(item) for key, item in value.items()}


class AuditRecorder:
    """Appends audit rows on a session of its own; failures never reach the caller."""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def registrar(
        self,
        acao: str,
        tabela: str,
        registro_id: int,
        antes: dict[str, Any] | None,
        depois: dict[str, Any] | None,
        usuario_id: int | None,
        ip: str | None,
    ) -> None:
        db = self.session_factory()
        try:
            db.add(
                Auditoria(
                    acao=acao,
                    tabela=tabela,
                    registro_id=int(registro_id),
                    dados_antigos=_snapshot(antes),
                    dados_novos=_snapshot(depois),
                    usuario_id=usuario_id,
                    ip=ip,
                )
            )
            db.commit()
        except Exception:
            logger.exception("Erro ao registrar auditoria %s %s/%s", acao, tabela, registro_id)
            db.rollback()
        finally:
            db.close()


_recorder: AuditRecorder | None = None


def get_audit_recorder() -> AuditRecorder:
    global _recorder
    if _recorder is None:
        from demandas.db import SessionLocal

        _recorder = AuditRecorder(SessionLocal)
    return _recorder
