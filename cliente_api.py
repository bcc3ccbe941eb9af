import logging

import requests

import config
from agregacao import TipoEvento


logger = logging.getLogger(__name__)

JSON_HEADERS = {"Content-Type": "application/json"}


class ErroApi(Exception):
    """Falha ao falar com o backend (rede ou resposta não 2xx)."""

    def __init__(self, mensagem, status_code=None):
        super().__init__(mensagem)
        self.mensagem = mensagem
        self.status_code = status_code


def turmas_validas(turmas):
    """Remove as turmas de exemplo do backend (id 0 ou nome "string") e ordena por nome."""
    validas = [
        t for t in turmas
        if t.get("id") != 0 and str(t.get("nome")).lower() != "string"
    ]
    return sorted(validas, key=lambda t: str(t.get("nome")).casefold())


class VibeCheckClient:
    def __init__(self, api_url=None, timeout=None, session=None):
        """
        api_url: base do backend (padrão: config.API_BASE)
        timeout: segundos por requisição
        session: requests.Session opcional, útil para reaproveitar conexões
        """
        self.api_url = (api_url or config.API_BASE).rstrip("/")
        self.timeout = timeout if timeout is not None else config.API_TIMEOUT
        self.session = session or requests.Session()

    @property
    def login_url(self):
        return f"{self.api_url}/login"

    def _request(self, method, path, erro, cookies=None, **kwargs):
        url = f"{self.api_url}{path}"
        try:
            r = self.session.request(method, url, cookies=cookies, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.error("[API] Falha em %s %s: %s", method, path, e)
            raise ErroApi(erro) from e
        if not r.ok:
            logger.error("[API] Erro %s em %s %s: %s", r.status_code, method, path, r.text)
            raise ErroApi(erro, status_code=r.status_code)
        logger.debug("[API] %s %s -> %s", method, path, r.status_code)
        return r

    def _json(self, r, erro):
        try:
            return r.json()
        except ValueError as e:
            logger.error("[API] Resposta inválida de %s: %s", r.url, r.text)
            raise ErroApi(erro, status_code=r.status_code) from e

    def logout(self, cookies=None):
        self._request("POST", "/logout", "Erro ao fazer logout", cookies=cookies)

    def listar_turmas(self, cookies=None):
        erro = "Erro ao buscar turmas"
        r = self._request("GET", "/api/codigo/turmas", erro, cookies=cookies, headers=JSON_HEADERS)
        return turmas_validas(self._json(r, erro))

    def editar_turma(self, turma_id, nome, cookies=None):
        # O backend espera o novo nome cru no corpo
        self._request(
            "PUT",
            f"/api/turmas/{turma_id}",
            "Erro ao editar turma",
            cookies=cookies,
            headers=JSON_HEADERS,
            data=nome.encode("utf-8"),
        )

    def apagar_turma(self, turma_id, cookies=None):
        self._request("DELETE", f"/api/turmas/{turma_id}", "Erro ao apagar turma", cookies=cookies)

    def liberar_codigo(self, nome_turma, tipo=TipoEvento.CHECKIN, cookies=None):
        tipo = TipoEvento(tipo)
        erro = f"Erro ao gerar código de {'check-in' if tipo is TipoEvento.CHECKIN else 'check-out'}"
        r = self._request(
            "POST",
            f"/api/codigo/liberar-{tipo.value.lower()}",
            erro,
            cookies=cookies,
            headers=JSON_HEADERS,
            json={"nomeTurma": nome_turma},
        )
        dados = self._json(r, erro)
        if not isinstance(dados, dict):
            raise ErroApi(erro, status_code=r.status_code)
        codigo = dados.get("codigo")
        logger.info("[API] Código de %s liberado para a turma %s.", tipo.value, nome_turma)
        return codigo

    def eventos_dashboard(self, cookies=None):
        erro = "Erro ao buscar dados do dashboard"
        r = self._request("GET", "/api/codigo/dashboard", erro, cookies=cookies, headers=JSON_HEADERS)
        eventos = self._json(r, erro)
        if not isinstance(eventos, list):
            raise ErroApi(erro, status_code=r.status_code)
        return eventos

    def verificar_codigo(self, codigo, cookies=None):
        erro = "Erro ao verificar o código"
        r = self._request(
            "GET",
            "/api/registro/verificar-codigo",
            erro,
            cookies=cookies,
            params={"codigo": codigo},
        )
        return self._json(r, erro) is True

    def registrar_emocao(self, codigo, emocao, cookies=None):
        self._request(
            "POST",
            "/api/registro/registrar",
            "Erro ao registrar emoção",
            cookies=cookies,
            params={"codigo": codigo, "emocao": int(emocao)},
        )
        logger.info("[API] Emoção %s registrada.", emocao)
