import pytest
from fastapi.testclient import TestClient

from cliente_api import ErroApi
from painel.main import app, get_cliente


EVENTOS = [
    {"data": "01/06/2024 10:00", "emocao": 1, "turma": "A", "tipo": "CHECKIN"},
    {"data": "02/06/2024 11:00", "emocao": 1, "turma": "A", "tipo": "CHECKIN"},
    {"data": "03/06/2024 09:00", "emocao": 2, "turma": "B", "tipo": "CHECKOUT"},
]


class FakeCliente:
    """Backend em memória com registro das chamadas feitas pelo painel."""

    login_url = "http://backend.test/login"

    def __init__(self):
        self.eventos = [dict(e) for e in EVENTOS]
        self.turmas = [{"id": 2, "nome": "B"}, {"id": 1, "nome": "A"}]
        self.codigos_validos = {"ABC123"}
        self.falhas = set()
        self.chamadas = []

    def _chamar(self, nome, *args):
        self.chamadas.append((nome,) + args)
        if nome in self.falhas:
            raise ErroApi(f"falha em {nome}", status_code=500)

    def logout(self, cookies=None):
        self._chamar("logout")

    def listar_turmas(self, cookies=None):
        self._chamar("listar_turmas")
        return sorted(self.turmas, key=lambda t: t["nome"])

    def editar_turma(self, turma_id, nome, cookies=None):
        self._chamar("editar_turma", turma_id, nome)

    def apagar_turma(self, turma_id, cookies=None):
        self._chamar("apagar_turma", turma_id)

    def liberar_codigo(self, nome_turma, tipo, cookies=None):
        self._chamar("liberar_codigo", nome_turma, tipo)
        return "XYZ789"

    def eventos_dashboard(self, cookies=None):
        self._chamar("eventos_dashboard")
        return list(self.eventos)

    def verificar_codigo(self, codigo, cookies=None):
        self._chamar("verificar_codigo", codigo)
        return codigo in self.codigos_validos

    def registrar_emocao(self, codigo, emocao, cookies=None):
        self._chamar("registrar_emocao", codigo, emocao)


@pytest.fixture
def fake():
    return FakeCliente()


@pytest.fixture
def client(fake):
    app.dependency_overrides[get_cliente] = lambda: fake
    yield TestClient(app)
    app.dependency_overrides.clear()
