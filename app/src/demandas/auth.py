from __future__ import annotations

from typing import Optional

from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.orm import Session

from demandas.models import Usuario
from demandas.settings import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.BCRYPT_ROUNDS)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def authenticate_user(db: Session, email: str, senha: str) -> Optional[Usuario]:
    usuario = db.execute(select(Usuario).where(Usuario.email == email)).scalar_one_or_none()
    if not usuario:
        # unknown e-mails pay the same hashing cost
        pwd_context.dummy_verify()
        return None
    if not verify_password(senha, usuario.senha_hash):
        return None
    return usuario
