from __future__ import annotations

import logging

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from demandas.auth import get_password_hash
from demandas.models import ROLE_FUNCIONARIO, ROLE_GESTOR, Usuario
from demandas.settings import settings

logger = logging.getLogger(__name__)

USUARIOS_PADRAO = [
    {"id": 1, "nome": "Ranielly Miranda De Souza", "email": "ranielly-s@zaminebrasil.com", "nivel": "Senior", "pontos": 450, "conquistas": ["star", "fire", "gold"], "role": ROLE_FUNCIONARIO},
    {"id": 2, "nome": "Girlene da Silva Nogueira", "email": "girlene-n@zaminebrasil.com", "nivel": "Pleno", "pontos": 380, "conquistas": ["star", "silver"], "role": ROLE_FUNCIONARIO},
    {"id": 3, "nome": "Rafaela Cristine da Silva Martins", "email": "rafaela-m@zaminebrasil.com", "nivel": "Senior", "pontos": 520, "conquistas": ["star", "fire", "gold"], "role": ROLE_FUNCIONARIO},
    {"id": 5, "nome": "Marcos Antônio Lino Rosa", "email": "marcos-a@zaminebrasil.com", "nivel": "Junior", "pontos": 280, "conquistas": ["star"], "role": ROLE_FUNCIONARIO},
    {"id": 6, "nome": "Marcos Paulo Moraes Borges", "email": "marcos-b@zaminebrasil.com", "nivel": "Pleno", "pontos": 410, "conquistas": ["star", "silver"], "role": ROLE_FUNCIONARIO},
    {"id": 7, "nome": "Marcelo Goncalves de Paula", "email": "marcelo-p@zaminebrasil.com", "nivel": "Senior", "pontos": 480, "conquistas": ["star", "fire", "gold"], "role": ROLE_FUNCIONARIO},
    {"id": 8, "nome": "Higor Ataides Macedo", "email": "higor-a@zaminebrasil.com", "nivel": "Junior", "pontos": 250, "conquistas": ["star"], "role": ROLE_FUNCIONARIO},
    {"id": 9, "nome": "Weslley Ferreira de Siqueira", "email": "weslley-f@zaminebrasil.com", "nivel": "Pleno", "pontos": 360, "conquistas": ["star", "silver"], "role": ROLE_FUNCIONARIO},
    {"id": 10, "nome": "Jadson Joao Romano", "email": "jadson-r@zaminebrasil.com", "nivel": "Senior", "pontos": 440, "conquistas": ["star", "fire", "gold"], "role": ROLE_FUNCIONARIO},
    {"id": 11, "nome": "Charles de Andrade", "email": "charles-a@zaminebrasil.com", "nivel": "Pleno", "pontos": 390, "conquistas": ["star", "silver"], "role": ROLE_FUNCIONARIO},
    {"id": 12, "nome": "Jose Carlos Rodrigues de Santana", "email": "jose-s@zaminebrasil.com", "nivel": "Junior", "pontos": 220, "conquistas": ["star"], "role": ROLE_FUNCIONARIO},
    {"id": 13, "nome": "Max Henrique Araujo", "email": "max-r@zaminebrasil.com", "nivel": "Pleno", "pontos": 340, "conquistas": ["star", "silver"], "role": ROLE_FUNCIONARIO},
    {"id": 99, "nome": "Gestor do Sistema", "email": "wallysson-s@zaminebrasil.com", "nivel": "Administrador", "pontos": 999, "conquistas": ["star", "fire", "gold", "crown"], "role": ROLE_GESTOR},
    {"id": 100, "nome": "Wallysson Diego Santiago Santos", "email": "wallysson-s@zaminebrasil.com", "nivel": "Coordenador", "pontos": 999, "conquistas": ["star", "fire", "gold", "crown"], "role": ROLE_GESTOR},
    {"id": 101, "nome": "Julio Cesar Sanches", "email": "julio-s@zaminebrasil.com", "nivel": "Gerente", "pontos": 999, "conquistas": ["star", "fire", "gold", "crown"], "role": ROLE_GESTOR},
]


def _senha_padrao(role: str) -> str:
    if role == ROLE_GESTOR:
        return settings.SEED_PASSWORD_GESTOR
    return settings.SEED_PASSWORD_FUNCIONARIO


def seed_usuarios(db: Session) -> int:
    """Inserts the fixed roster, skipping entries whose id, name or e-mail already exist."""
    criados = 0
    hashes: dict[str, str] = {}
    for item in USUARIOS_PADRAO:
        exists = db.execute(
            select(Usuario.id).where(
                or_(Usuario.id == item["id"], Usuario.nome == item["nome"], Usuario.email == item["email"])
            )
        ).first()
        if exists:
            logger.debug("Usuario %s ja existe, ignorado", item["id"])
            continue
        role = item["role"]
        if role not in hashes:
            hashes[role] = get_password_hash(_senha_padrao(role))
        db.add(Usuario(senha_hash=hashes[role], **item))
        db.flush()
        criados += 1
    db.commit()
    if criados:
        logger.info("%s usuarios padrao inseridos", criados)
    return criados


def list_usuarios(db: Session) -> list[Usuario]:
    return db.execute(select(Usuario).order_by(Usuario.nome)).scalars().all()
