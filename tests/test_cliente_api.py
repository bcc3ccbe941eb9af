from unittest.mock import Mock

import pytest
import requests

from agregacao import TipoEvento
from cliente_api import ErroApi, VibeCheckClient, turmas_validas


def resposta(status=200, payload=None, json_invalido=False):
    r = Mock()
    r.ok = status < 400
    r.status_code = status
    r.text = ""
    r.url = "http://api.test"
    if json_invalido:
        r.json.side_effect = ValueError("sem json")
    else:
        r.json.return_value = payload
    return r


@pytest.fixture
def session():
    return Mock()


@pytest.fixture
def api(session):
    return VibeCheckClient(api_url="http://api.test/", timeout=2, session=session)


def test_login_url(api):
    assert api.login_url == "http://api.test/login"


def test_turmas_validas_remove_exemplos_e_ordena():
    turmas = [
        {"id": 3, "nome": "matemática"},
        {"id": 0, "nome": "Turma zero"},
        {"id": 4, "nome": "String"},
        {"id": 1, "nome": "Biologia"},
    ]
    assert turmas_validas(turmas) == [{"id": 1, "nome": "Biologia"}, {"id": 3, "nome": "matemática"}]


def test_listar_turmas(api, session):
    session.request.return_value = resposta(payload=[{"id": 2, "nome": "B"}, {"id": 0, "nome": "x"}])
    assert api.listar_turmas(cookies={"JSESSIONID": "abc"}) == [{"id": 2, "nome": "B"}]
    args, kwargs = session.request.call_args
    assert args == ("GET", "http://api.test/api/codigo/turmas")
    assert kwargs["cookies"] == {"JSESSIONID": "abc"}
    assert kwargs["timeout"] == 2


@pytest.mark.parametrize(
    "tipo, caminho",
    [
        (TipoEvento.CHECKIN, "/api/codigo/liberar-checkin"),
        ("CHECKOUT", "/api/codigo/liberar-checkout"),
    ],
)
def test_liberar_codigo(api, session, tipo, caminho):
    session.request.return_value = resposta(payload={"codigo": "XYZ789"})
    assert api.liberar_codigo("Turma A", tipo) == "XYZ789"
    args, kwargs = session.request.call_args
    assert args == ("POST", f"http://api.test{caminho}")
    assert kwargs["json"] == {"nomeTurma": "Turma A"}


def test_editar_turma_envia_nome_cru(api, session):
    session.request.return_value = resposta()
    api.editar_turma(5, "Física")
    args, kwargs = session.request.call_args
    assert args == ("PUT", "http://api.test/api/turmas/5")
    assert kwargs["data"] == "Física".encode("utf-8")


def test_apagar_turma(api, session):
    session.request.return_value = resposta()
    api.apagar_turma(5)
    assert session.request.call_args[0] == ("DELETE", "http://api.test/api/turmas/5")


@pytest.mark.parametrize("payload, esperado", [(True, True), (False, False), ("true", False)])
def test_verificar_codigo(api, session, payload, esperado):
    session.request.return_value = resposta(payload=payload)
    assert api.verificar_codigo("ABC") is esperado
    assert session.request.call_args[1]["params"] == {"codigo": "ABC"}


def test_registrar_emocao(api, session):
    session.request.return_value = resposta()
    api.registrar_emocao("ABC", "3")
    args, kwargs = session.request.call_args
    assert args == ("POST", "http://api.test/api/registro/registrar")
    assert kwargs["params"] == {"codigo": "ABC", "emocao": 3}


def test_eventos_dashboard(api, session):
    eventos = [{"data": "01/06/2024 10:00", "emocao": 1, "turma": "A", "tipo": "CHECKIN"}]
    session.request.return_value = resposta(payload=eventos)
    assert api.eventos_dashboard() == eventos


def test_eventos_dashboard_formato_inesperado(api, session):
    session.request.return_value = resposta(payload={"erro": "x"})
    with pytest.raises(ErroApi):
        api.eventos_dashboard()


def test_status_de_erro(api, session):
    session.request.return_value = resposta(status=401)
    with pytest.raises(ErroApi) as exc:
        api.logout()
    assert exc.value.status_code == 401
    assert exc.value.mensagem == "Erro ao fazer logout"


def test_falha_de_rede(api, session):
    session.request.side_effect = requests.ConnectionError("recusada")
    with pytest.raises(ErroApi) as exc:
        api.eventos_dashboard()
    assert exc.value.status_code is None
    assert exc.value.mensagem == "Erro ao buscar dados do dashboard"


def test_json_invalido(api, session):
    session.request.return_value = resposta(json_invalido=True)
    with pytest.raises(ErroApi):
        api.listar_turmas()
