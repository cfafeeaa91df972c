from datetime import date, timedelta

import pytest
from pydantic import ValidationError

from demandas.schemas import DemandaCreate, primeira_mensagem


def valid_payload(**overrides):
    payload = {
        "nomeDemanda": "Trocar lampadas",
        "categoria": "Manutencao",
        "prioridade": "Importante",
        "complexidade": "Fácil",
        "descricao": "Trocar as lampadas do galpao 2",
        "local": "Galpao 2",
        "dataLimite": date.today().isoformat(),
    }
    payload.update(overrides)
    return payload


def gate_message(payload):
    with pytest.raises(ValidationError) as exc_info:
        DemandaCreate.model_validate(payload)
    return primeira_mensagem(exc_info.value)


def test_today_is_accepted():
    result = DemandaCreate.model_validate(valid_payload())
    assert result.data_limite == date.today()


def test_yesterday_is_rejected():
    yesterday = (date.today() - timedelta(days=1)).isoformat()
    assert gate_message(valid_payload(dataLimite=yesterday)) == "Data limite nao pode ser anterior a hoje"


def test_iso_datetime_deadline():
    tomorrow = date.today() + timedelta(days=1)
    result = DemandaCreate.model_validate(valid_payload(dataLimite=f"{tomorrow.isoformat()}T12:00:00.000Z"))
    assert result.data_limite == tomorrow


def test_name_length_boundary():
    assert gate_message(valid_payload(nomeDemanda="ab")).startswith("Nome da demanda")
    assert gate_message(valid_payload(nomeDemanda="   ab   ")).startswith("Nome da demanda")
    assert DemandaCreate.model_validate(valid_payload(nomeDemanda="abc")).nome_demanda == "abc"


def test_first_failure_wins():
    assert gate_message({"categoria": "", "dataLimite": "ontem"}).startswith("Nome da demanda")
    assert gate_message(valid_payload(categoria="", prioridade="Urgente")) == "Categoria e obrigatoria"


@pytest.mark.parametrize(
    "overrides,message",
    [
        ({"prioridade": "Urgente"}, "Prioridade e obrigatoria e deve ser: Importante, Média ou Relevante"),
        ({"complexidade": "Medio"}, "Complexidade e obrigatoria e deve ser: Fácil, Médio ou Difícil"),
        ({"descricao": "curta"}, "Descricao e obrigatoria e deve ter pelo menos 10 caracteres"),
        ({"local": "  "}, "Local e obrigatorio"),
        ({"dataLimite": ""}, "Data limite e obrigatoria"),
        ({"dataLimite": "31/12/2099"}, "Data limite invalida"),
    ],
)
def test_field_rules(overrides, message):
    assert gate_message(valid_payload(**overrides)) == message


def test_non_object_payload():
    assert gate_message(["nao", "e", "objeto"]) == "Requisicao invalida"
