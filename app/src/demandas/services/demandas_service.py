from __future__ import annotations

import logging
import secrets
import string
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError
from sqlalchemy import case, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from demandas.models import (
    STATUS_APROVADA,
    STATUS_EM_ANALISE,
    STATUS_PENDENTE,
    STATUS_REPROVADA,
    Demanda,
)
from demandas.schemas import DemandaFields, DemandaOut, DemandaRestore, primeira_mensagem
from demandas.services.normalizer import normalizar_demanda

logger = logging.getLogger(__name__)

_TAG_ALPHABET = string.ascii_lowercase + string.digits

# keys of the wire payload that never map onto stored columns
_CAMPOS_CONTROLE = ("id", "usuarioId", "dataAtualizacao", "criadoPor", "atualizadoPor")


def gerar_tag() -> str:
    sufixo = "".join(secrets.choice(_TAG_ALPHABET) for _ in range(9))
    return f"DEM-{int(time.time() * 1000)}-{sufixo}"


def _as_int(value: Any) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _wire(demanda: Demanda) -> dict[str, Any]:
    return DemandaOut.model_validate(demanda).model_dump(by_alias=True)


def list_demandas(
    db: Session,
    filters: dict[str, Any],
    limit: int = 100,
    offset: int = 0,
) -> list[Demanda]:
    query = select(Demanda)

    status = filters.get("status")
    if status:
        query = query.where(Demanda.status == status)

    funcionario_id = filters.get("funcionarioId")
    if funcionario_id:
        query = query.where(Demanda.funcionario_id == int(funcionario_id))

    categoria = filters.get("categoria")
    if categoria:
        query = query.where(Demanda.categoria == categoria)

    prioridade = filters.get("prioridade")
    if prioridade:
        query = query.where(Demanda.prioridade == prioridade)

    return (
        db.execute(
            query.order_by(Demanda.data_criacao.desc(), Demanda.id.desc()).offset(offset).limit(limit)
        )
        .scalars()
        .all()
    )


def search_demandas(db: Session, q: str | None, limit: int = 20) -> list[Demanda]:
    if not q or len(q) < 2:
        return []
    like = f"%{q}%"
    query = (
        select(Demanda)
        .where(
            or_(
                Demanda.nome_demanda.ilike(like),
                Demanda.descricao.ilike(like),
                Demanda.tag.ilike(like),
                Demanda.categoria.ilike(like),
            )
        )
        .order_by(Demanda.data_criacao.desc(), Demanda.id.desc())
        .limit(limit)
    )
    return db.execute(query).scalars().all()


def get_demanda(db: Session, demanda_id) -> Demanda | None:
    return db.execute(select(Demanda).where(Demanda.id == demanda_id)).scalar_one_or_none()


def count_demandas(db: Session) -> int:
    return db.execute(select(func.count()).select_from(Demanda)).scalar_one()


def create_demanda(db: Session, payload: dict[str, Any]) -> Demanda:
    dados = normalizar_demanda(payload)
    if not dados.get("tag"):
        dados["tag"] = gerar_tag()
    fields = DemandaFields.model_validate(dados)

    demanda = Demanda(**fields.model_dump())
    demanda.criado_por = fields.funcionario_id
    db.add(demanda)
    db.commit()
    db.refresh(demanda)
    logger.info("Demanda criada: id=%s tag=%s", demanda.id, demanda.tag)
    return demanda


def update_demanda(db: Session, demanda: Demanda, payload: dict[str, Any]) -> Demanda:
    incoming = {key: value for key, value in payload.items() if key not in _CAMPOS_CONTROLE}
    merged = normalizar_demanda({**_wire(demanda), **incoming})
    fields = DemandaFields.model_validate(merged)

    for key, value in fields.model_dump().items():
        setattr(demanda, key, value)
    demanda.data_atualizacao = datetime.now(timezone.utc)
    demanda.atualizado_por = (
        _as_int(payload.get("usuarioId"))
        or _as_int(payload.get("funcionarioId"))
        or demanda.funcionario_id
    )
    db.add(demanda)
    db.commit()
    db.refresh(demanda)
    return demanda


def delete_demanda(db: Session, demanda: Demanda) -> None:
    db.delete(demanda)
    db.commit()


def estatisticas(db: Session, desde: datetime) -> dict[str, Any]:
    def contar(status: str):
        return func.count(case((Demanda.status == status, 1)))

    row = db.execute(
        select(
            func.count().label("total"),
            contar(STATUS_APROVADA).label("aprovadas"),
            contar(STATUS_PENDENTE).label("pendentes"),
            contar(STATUS_REPROVADA).label("reprovadas"),
            contar(STATUS_EM_ANALISE).label("em_analise"),
            func.count(case((Demanda.is_rotina.is_(True), 1))).label("rotina"),
        ).where(Demanda.data_criacao >= desde)
    ).one()

    por_status = db.execute(
        select(Demanda.status, func.count())
        .where(Demanda.data_criacao >= desde)
        .group_by(Demanda.status)
        .order_by(Demanda.status)
    ).all()

    result = dict(row._mapping)
    result["por_status"] = {status: total for status, total in por_status}
    return result


@dataclass
class RestoreResult:
    restauradas: int = 0
    erros: int = 0
    mensagens: list[str] = field(default_factory=list)


def restore_demandas(db: Session, entries: list[Any]) -> RestoreResult:
    """Upserts each entry by id; every entry is committed on its own."""
    result = RestoreResult()
    for index, entry in enumerate(entries, start=1):
        if not isinstance(entry, dict):
            result.erros += 1
            result.mensagens.append(f"Erro ao processar demanda {index}: formato invalido")
            continue
        try:
            fields = DemandaRestore.model_validate(normalizar_demanda(entry))
        except ValidationError as exc:
            result.erros += 1
            result.mensagens.append(f"Erro ao processar demanda {index}: {primeira_mensagem(exc)}")
            continue

        try:
            db.merge(Demanda(**fields.model_dump(exclude_unset=True)))
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error("Erro ao restaurar demanda %s: %s", index, exc)
            result.erros += 1
            result.mensagens.append(f"Erro na demanda {index}: {getattr(exc, 'orig', None) or exc}")
            continue
        result.restauradas += 1
    return result
