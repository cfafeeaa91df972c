"""Input sanitization for demand payloads.

Clients send demands in loosely typed shapes: the collection fields may
arrive as JSON text, as lists, or not at all, and the recurrence flag may be
any truthy value. ``normalizar_demanda`` turns any of these into the
canonical wire shape before it reaches the store or a response.
"""

from __future__ import annotations

import json
import logging
import math
from datetime import datetime, timezone
from typing import Any, Mapping

logger = logging.getLogger(__name__)

CAMPOS_LISTA = ("diasSemana", "atribuidos", "anexosCriacao", "anexosResolucao")

FUNCIONARIO_PADRAO_ID = 1
NOME_FUNCIONARIO_PADRAO = "Usuário"
EMAIL_FUNCIONARIO_PADRAO = "usuario@exemplo.com"
STATUS_PADRAO = "pendente"


def coagir_lista(value: Any, campo: str = "lista") -> list[Any]:
    if isinstance(value, str):
        try:
            parsed = json.loads(value)
        except (ValueError, RecursionError):
            logger.warning("Falha ao interpretar %s: %r", campo, value[:200])
            return []
        if not isinstance(parsed, list):
            logger.warning("Campo %s nao contem uma lista", campo)
            return []
        return parsed
    if isinstance(value, (list, tuple)):
        return list(value)
    return []


def valor_verdadeiro(value: Any) -> bool:
    if value is None or value is False:
        return False
    if isinstance(value, str):
        return value != ""
    if isinstance(value, (int, float)):
        return not (value == 0 or (isinstance(value, float) and math.isnan(value)))
    return True


def agora_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def normalizar_demanda(demanda: Mapping[str, Any] | None) -> dict[str, Any] | None:
    if demanda is None:
        return None

    data = dict(demanda)
    for campo in CAMPOS_LISTA:
        data[campo] = coagir_lista(data.get(campo), campo)

    data["isRotina"] = valor_verdadeiro(data.get("isRotina"))

    if not data.get("status"):
        data["status"] = STATUS_PADRAO
    if not data.get("dataCriacao"):
        data["dataCriacao"] = agora_iso()
    if not data.get("funcionarioId"):
        data["funcionarioId"] = FUNCIONARIO_PADRAO_ID
    if not data.get("nomeFuncionario"):
        data["nomeFuncionario"] = NOME_FUNCIONARIO_PADRAO
    if not data.get("emailFuncionario"):
        data["emailFuncionario"] = EMAIL_FUNCIONARIO_PADRAO
    return data
