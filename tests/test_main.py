import json

import pytest

import main
from cliente_api import ErroApi, VibeCheckClient


EVENTOS = [
    {"data": "01/06/2024 10:00", "emocao": 1, "turma": "A", "tipo": "CHECKIN"},
    {"data": "02/06/2024 11:00", "emocao": 1, "turma": "A", "tipo": "CHECKIN"},
    {"data": "03/06/2024 09:00", "emocao": 2, "turma": "B", "tipo": "CHECKOUT"},
]


@pytest.fixture
def arquivo(tmp_path):
    caminho = tmp_path / "eventos.json"
    caminho.write_text(json.dumps(EVENTOS), encoding="utf-8")
    return str(caminho)


def test_exporta_para_stdout(arquivo, capsys):
    assert main.main(["--arquivo", arquivo, "--periodo", "month"]) == 0
    assert capsys.readouterr().out == "06/2024:\n  Muito Feliz: 2\n  Feliz: 1\n\n"


def test_exporta_para_arquivo_com_filtros(arquivo, tmp_path):
    saida = tmp_path / "dados_grafico.txt"
    codigo = main.main(["--arquivo", arquivo, "--periodo", "day", "--turma", "A", "--saida", str(saida)])
    assert codigo == 0
    assert saida.read_text(encoding="utf-8") == "01/06:\n  Muito Feliz: 1\n\n02/06:\n  Muito Feliz: 1\n\n"


def test_sem_dados(arquivo):
    assert main.main(["--arquivo", arquivo, "--tipo", "CHECKOUT", "--turma", "A"]) == 1


def test_arquivo_inexistente(tmp_path):
    assert main.main(["--arquivo", str(tmp_path / "nada.json")]) == 1


def test_busca_no_backend_com_cookies(monkeypatch, capsys):
    recebidos = {}

    def eventos_dashboard(self, cookies=None):
        recebidos["cookies"] = cookies
        recebidos["api"] = self.api_url
        return EVENTOS

    monkeypatch.setattr(VibeCheckClient, "eventos_dashboard", eventos_dashboard)
    codigo = main.main(["--api", "http://api.test", "--cookie", "JSESSIONID=abc", "--periodo", "month"])
    assert codigo == 0
    assert recebidos == {"cookies": {"JSESSIONID": "abc"}, "api": "http://api.test"}
    assert "06/2024:" in capsys.readouterr().out


def test_backend_fora(monkeypatch):
    def eventos_dashboard(self, cookies=None):
        raise ErroApi("Erro ao buscar dados do dashboard")

    monkeypatch.setattr(VibeCheckClient, "eventos_dashboard", eventos_dashboard)
    assert main.main([]) == 1


def test_cookie_invalido():
    with pytest.raises(SystemExit) as exc:
        main.main(["--cookie", "semvalor"])
    assert exc.value.code == 2
