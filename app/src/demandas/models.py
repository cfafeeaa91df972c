from __future__ import annotations

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func
from sqlalchemy.types import JSON

Base = declarative_base()

JSONType = JSONB().with_variant(JSON(), "sqlite")

STATUS_PENDENTE = "pendente"
STATUS_APROVADA = "aprovada"
STATUS_REPROVADA = "reprovada"
STATUS_EM_ANALISE = "finalizado_pendente_aprovacao"

PRIORIDADES = ("Importante", "Média", "Relevante")
COMPLEXIDADES = ("Fácil", "Médio", "Difícil")
TIPOS_FEEDBACK = ("positivo", "construtivo", "negativo")

ROLE_FUNCIONARIO = "funcionario"
ROLE_GESTOR = "gestor"


class Demanda(Base):
    __tablename__ = "demandas"

    id = Column(Integer, primary_key=True, autoincrement=True)
    tag = Column(String(100), unique=True, nullable=True)
    funcionario_id = Column(Integer, nullable=False)
    nome_funcionario = Column(String(255), nullable=False)
    email_funcionario = Column(String(320), nullable=False)
    categoria = Column(String(150), nullable=False)
    prioridade = Column(String(30), nullable=False)
    complexidade = Column(String(30), nullable=False)
    descricao = Column(Text, nullable=False)
    local = Column(String(255), nullable=False)
    nome_demanda = Column(String(255), nullable=True)
    data_criacao = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    data_limite = Column(Date, nullable=False)
    data_atualizacao = Column(DateTime(timezone=True), server_default=func.now(), nullable=True)
    data_conclusao = Column(DateTime(timezone=True), nullable=True)
    status = Column(String(50), nullable=False, default=STATUS_PENDENTE)
    is_rotina = Column(Boolean, nullable=False, default=False)
    dias_semana = Column(JSONType, nullable=False, default=list)
    atribuidos = Column(JSONType, nullable=False, default=list)
    anexos_criacao = Column(JSONType, nullable=False, default=list)
    anexos_resolucao = Column(JSONType, nullable=False, default=list)
    comentarios = Column(Text, nullable=True, default="")
    comentario_gestor = Column(Text, nullable=True, default="")
    comentario_reprovacao_atribuicao = Column(Text, nullable=True, default="")
    criado_por = Column(Integer, nullable=True)
    atualizado_por = Column(Integer, nullable=True)


class Usuario(Base):
    __tablename__ = "usuarios"

    id = Column(Integer, primary_key=True, autoincrement=False)
    nome = Column(String(255), unique=True, nullable=False)
    email = Column(String(320), unique=True, nullable=False, index=True)
    senha_hash = Column(String(255), nullable=False)
    nivel = Column(String(50), nullable=True)
    pontos = Column(Integer, nullable=False, default=0)
    conquistas = Column(JSONType, nullable=False, default=list)
    role = Column(String(20), nullable=False, default=ROLE_FUNCIONARIO)


class Auditoria(Base):
    __tablename__ = "auditoria"

    id = Column(Integer, primary_key=True, autoincrement=True)
    acao = Column(String(20), nullable=False)
    tabela = Column(String(100), nullable=False)
    registro_id = Column(Integer, nullable=False)
    dados_antigos = Column(JSONType, nullable=True)
    dados_novos = Column(JSONType, nullable=True)
    usuario_id = Column(Integer, nullable=True)
    data_hora = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    ip = Column(String(64), nullable=True)


class Feedback(Base):
    __tablename__ = "feedbacks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    funcionario_id = Column(Integer, nullable=False)
    gestor_id = Column(Integer, nullable=False)
    tipo = Column(String(20), nullable=False)
    mensagem = Column(Text, nullable=False)
    data_criacao = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


Index("ix_demandas_status", Demanda.status)
Index("ix_demandas_funcionario_id", Demanda.funcionario_id)
Index("ix_demandas_data_limite", Demanda.data_limite)
Index("ix_demandas_categoria", Demanda.categoria)
Index("ix_demandas_prioridade", Demanda.prioridade)
Index("ix_demandas_data_criacao", Demanda.data_criacao)
Index("ix_auditoria_tabela_registro", Auditoria.tabela, Auditoria.registro_id)
Index("ix_feedbacks_funcionario_id", Feedback.funcionario_id)
