from __future__ import annotations

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, HTTPException, status
from pydantic import ValidationError
from sqlalchemy.orm import Session

from demandas.auth import authenticate_user
from demandas.db import get_db
from demandas.errors import bad_request
from demandas.schemas import LoginForm, usuario_to_dict
from demandas.services.usuarios_service import list_usuarios

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/usuarios")
def api_list_usuarios(db: Annotated[Session, Depends(get_db)]):
    return {"success": True, "data": [usuario_to_dict(item) for item in list_usuarios(db)]}


@router.post("/auth/login")
def api_login(
    db: Annotated[Session, Depends(get_db)],
    payload: Annotated[dict[str, Any], Body()],
):
    try:
        data = LoginForm.model_validate(payload)
    except ValidationError:
        raise bad_request("Email e senha sao obrigatorios")
    if not data.email or not data.senha:
        raise bad_request("Email e senha sao obrigatorios")

    usuario = authenticate_user(db, data.email, data.senha)
    if not usuario:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Credenciais invalidas")
    return {"success": True, "usuario": usuario_to_dict(usuario)}


@router.post("/auth/reset-password")
def api_reset_password(payload: Annotated[dict[str, Any], Body()]):
    email = payload.get("email")
    if not email:
        raise bad_request("Email e obrigatorio")
    logger.info("Solicitacao de redefinicao de senha para %s", email)
    return {"success": True, "message": "Instrucoes de redefinicao de senha enviadas para o email"}


@router.post("/auth/register")
def api_register(payload: Annotated[dict[str, Any], Body()]):
    nome, email, role = payload.get("nome"), payload.get("email"), payload.get("role")
    if not nome or not email or not role:
        raise bad_request("Todos os campos sao obrigatorios")
    logger.info("Solicitacao de registro: %s, %s, %s", nome, email, role)
    return {"success": True, "message": "Solicitacao de cadastro recebida"}
