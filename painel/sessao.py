from fastapi import Request, Response


class SessaoCookie:
    """
    Guarda valores curtos do navegador (ex.: código de avaliação do aluno) em cookies.

    get/set/clear trabalham sobre uma cópia dos cookies da requisição; as
    alterações só chegam ao navegador quando ``aplicar`` é chamado na resposta.
    """

    def __init__(self, request: Request):
        self._cookies = dict(request.cookies)
        self._pendentes = []

    def get(self, key):
        return self._cookies.get(key) or None

    def set(self, key, value, ttl):
        self._cookies[key] = value
        self._pendentes.append((key, value, int(ttl)))

    def clear(self, key):
        self._cookies.pop(key, None)
        self._pendentes.append((key, None, 0))

    def aplicar(self, response: Response):
        for key, value, ttl in self._pendentes:
            if value is None:
                response.delete_cookie(key, path="/")
            else:
                response.set_cookie(key, value, max_age=ttl, path="/", httponly=True, samesite="lax")
        self._pendentes = []
        return response
