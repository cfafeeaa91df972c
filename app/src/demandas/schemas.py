from __future__ import annotations

from datetime import date, datetime
from typing import Annotated, Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from demandas.models import COMPLEXIDADES, PRIORIDADES, TIPOS_FEEDBACK
from demandas.services.normalizer import coagir_lista

CAMPOS_COMENTARIO = ("comentarios", "comentario_gestor", "comentario_reprovacao_atribuicao")

# 0 = domingo
DiaSemana = Annotated[int, Field(ge=0, le=6)]


def parse_data(value: Any) -> date:
    """Accepts ``YYYY-MM-DD`` or an ISO-8601 datetime and returns its calendar date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValueError("data invalida")
    raw = value.strip()
    try:
        return date.fromisoformat(raw)
    except ValueError:
        return datetime.fromisoformat(raw.replace("Z", "+00:00")).date()


def _texto(value: Any) -> str:
    if not isinstance(value, str):
        return ""
    return value.strip()


def _falha(message: str) -> PydanticCustomError:
    return PydanticCustomError("demanda_invalida", message)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class DemandaCreate(CamelModel):
    """Gate for new demands: checks run in order and stop at the first failure."""

    nome_demanda: str
    categoria: str
    prioridade: str
    complexidade: str
    descricao: str
    local: str
    data_limite: date

    @model_validator(mode="before")
    @classmethod
    def validar_campos(cls, data: Any):
        if not isinstance(data, dict):
            raise _falha("Requisicao invalida")

        if len(_texto(data.get("nomeDemanda"))) < 3:
            raise _falha("Nome da demanda e obrigatorio e deve ter pelo menos 3 caracteres")
        if not _texto(data.get("categoria")):
            raise _falha("Categoria e obrigatoria")
        if data.get("prioridade") not in PRIORIDADES:
            raise _falha("Prioridade e obrigatoria e deve ser: Importante, Média ou Relevante")
        if data.get("complexidade") not in COMPLEXIDADES:
            raise _falha("Complexidade e obrigatoria e deve ser: Fácil, Médio ou Difícil")
        if len(_texto(data.get("descricao"))) < 10:
            raise _falha("Descricao e obrigatoria e deve ter pelo menos 10 caracteres")
        if not _texto(data.get("local")):
            raise _falha("Local e obrigatorio")

        raw_limite = data.get("dataLimite")
        if not raw_limite:
            raise _falha("Data limite e obrigatoria")
        try:
            limite = parse_data(raw_limite)
        except ValueError:
            raise _falha("Data limite invalida")
        if limite < date.today():
            raise _falha("Data limite nao pode ser anterior a hoje")

        return {**data, "dataLimite": limite}


class DemandaFields(CamelModel):
    tag: str | None = None
    funcionario_id: int | None = None
    nome_funcionario: str | None = None
    email_funcionario: str | None = None
    categoria: str | None = None
    prioridade: str | None = None
    complexidade: str | None = None
    descricao: str | None = None
    local: str | None = None
    nome_demanda: str | None = None
    data_criacao: datetime | None = None
    data_limite: date | None = None
    data_conclusao: datetime | None = None
    status: str | None = None
    is_rotina: bool = False
    dias_semana: list[DiaSemana] = Field(default_factory=list)
    atribuidos: list[Any] = Field(default_factory=list)
    anexos_criacao: list[Any] = Field(default_factory=list)
    anexos_resolucao: list[Any] = Field(default_factory=list)
    comentarios: str = ""
    comentario_gestor: str = ""
    comentario_reprovacao_atribuicao: str = ""

    @field_validator("data_limite", mode="before")
    @classmethod
    def parse_limite(cls, v):
        if v is None or v == "":
            return None
        return parse_data(v)

    @field_validator("data_criacao", "data_conclusao", mode="before")
    @classmethod
    def empty_datetime(cls, v):
        if v == "":
            return None
        return v

    @field_validator("tag", mode="before")
    @classmethod
    def normalize_tag(cls, v):
        if v is None:
            return None
        value = str(v).strip()
        return value or None

    @field_validator(*CAMPOS_COMENTARIO, mode="before")
    @classmethod
    def empty_comment(cls, v):
        if v is None:
            return ""
        return v


class DemandaRestore(DemandaFields):
    id: int | None = None
    data_atualizacao: datetime | None = None
    criado_por: int | None = None
    atualizado_por: int | None = None

    @field_validator("data_atualizacao", mode="before")
    @classmethod
    def empty_atualizacao(cls, v):
        if v == "":
            return None
        return v


class DemandaOut(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: int
    tag: str | None
    funcionario_id: int
    nome_funcionario: str
    email_funcionario: str
    categoria: str
    prioridade: str
    complexidade: str
    descricao: str
    local: str
    nome_demanda: str | None
    data_criacao: datetime
    data_limite: date
    data_atualizacao: datetime | None
    data_conclusao: datetime | None
    status: str
    is_rotina: bool
    dias_semana: list[Any]
    atribuidos: list[Any]
    anexos_criacao: list[Any]
    anexos_resolucao: list[Any]
    comentarios: str | None
    comentario_gestor: str | None
    comentario_reprovacao_atribuicao: str | None
    criado_por: int | None
    atualizado_por: int | None

    @field_validator("dias_semana", "atribuidos", "anexos_criacao", "anexos_resolucao", mode="before")
    @classmethod
    def materializar_lista(cls, v, info: ValidationInfo):
        return coagir_lista(v, info.field_name)

    @field_validator("is_rotina", mode="before")
    @classmethod
    def rotina_padrao(cls, v):
        return bool(v)


class UsuarioOut(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: int
    nome: str
    email: str
    nivel: str | None
    pontos: int
    conquistas: list[str]
    role: str

    @field_validator("conquistas", mode="before")
    @classmethod
    def materializar_conquistas(cls, v):
        return coagir_lista(v, "conquistas")


class LoginForm(BaseModel):
    model_config = ConfigDict(extra="ignore")

    email: str | None = None
    senha: str | None = None


class FeedbackCreate(CamelModel):
    funcionario_id: int
    tipo: str
    mensagem: str
    gestor_id: int | None = None

    @model_validator(mode="before")
    @classmethod
    def validar_campos(cls, data: Any):
        if not isinstance(data, dict):
            raise PydanticCustomError("feedback_invalido", "Requisicao invalida")
        if not data.get("funcionarioId") or not data.get("tipo") or not data.get("mensagem"):
            raise PydanticCustomError("feedback_invalido", "Todos os campos sao obrigatorios")
        if data.get("tipo") not in TIPOS_FEEDBACK:
            raise PydanticCustomError("feedback_invalido", "Tipo de feedback invalido")
        return data


class FeedbackOut(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: int
    funcionario_id: int
    gestor_id: int
    tipo: str
    mensagem: str
    data_criacao: datetime


def primeira_mensagem(exc: ValidationError) -> str:
    for err in exc.errors():
        msg = err.get("msg")
        if not msg:
            continue
        loc = [str(part) for part in err.get("loc") or []]
        if loc and err.get("type") not in ("demanda_invalida", "feedback_invalido"):
            return f"{'.'.join(loc)}: {msg}"
        return msg
    return "Erro de validacao"


def demanda_to_dict(demanda) -> dict[str, Any]:
    return DemandaOut.model_validate(demanda).model_dump(mode="json", by_alias=True)


def usuario_to_dict(usuario) -> dict[str, Any]:
    return UsuarioOut.model_validate(usuario).model_dump(mode="json", by_alias=True)


def feedback_to_dict(feedback) -> dict[str, Any]:
    return FeedbackOut.model_validate(feedback).model_dump(mode="json", by_alias=True)
