# main.py
from enum import Enum
from typing import List
import logging

from fastapi import Depends, FastAPI, Form, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse, RedirectResponse

import config
from agregacao import (
    EMOTION_LABELS,
    Periodo,
    SENTINELAS,
    TipoEvento,
    aggregate,
    available_emotions,
    emotion_color,
    export_text,
)
from cliente_api import ErroApi, VibeCheckClient
from painel import paginas
from painel.models import CodigoLiberado, EdicaoTurma, LiberacaoCodigo, SerieEmocao, Turma
from painel.sessao import SessaoCookie


logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(title="Vibe Check")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

cliente = VibeCheckClient()


def get_cliente():
    return cliente


class RotaCodigo(str, Enum):
    checkin = "checkin"
    checkout = "checkout"

    @property
    def tipo(self):
        return TipoEvento(self.value.upper())


VALORES_EMOCAO = {str(codigo) for codigo in EMOTION_LABELS}

MENSAGENS_LIBERACAO = {
    TipoEvento.CHECKIN: "Falha ao liberar check-in. Tente novamente.",
    TipoEvento.CHECKOUT: "Falha ao liberar check-out. Tente novamente.",
}


def _erro(mensagem, status_code):
    return JSONResponse({"status": "erro", "mensagem": mensagem}, status_code=status_code)


@app.exception_handler(ErroApi)
async def erro_api_handler(request: Request, exc: ErroApi):
    return _erro(exc.mensagem, 502)


def _carregar_turmas(cliente, cookies):
    try:
        return cliente.listar_turmas(cookies)
    except ErroApi as e:
        logger.error("[TURMAS] Erro ao carregar turmas: %s", e.mensagem)
        return []


def _nome_turma(turmas, turma):
    """Resolve o id selecionado no filtro para o nome da turma gravado nos eventos."""
    if turma is None or str(turma).strip().lower() in SENTINELAS:
        return None
    for t in turmas:
        if str(t["id"]) == str(turma):
            return t["nome"]
    return None


def _pontos(cliente, cookies, periodo, turma, tipo, turmas=None):
    nome_turma = None
    if str(turma).strip().lower() not in SENTINELAS:
        if turmas is None:
            turmas = _carregar_turmas(cliente, cookies)
        nome_turma = _nome_turma(turmas, turma)
    eventos = cliente.eventos_dashboard(cookies)
    pontos = aggregate(eventos, periodo, nome_turma, tipo)
    logger.info(
        "[DASHBOARD] %d evento(s) -> %d ponto(s) (periodo=%s, turma=%s, tipo=%s)",
        len(eventos), len(pontos), Periodo(periodo).value, nome_turma, tipo,
    )
    return pontos


# ---------------------------------------------
# Login / logout
# ---------------------------------------------

@app.get("/", response_class=HTMLResponse)
def login_page(cliente: VibeCheckClient = Depends(get_cliente)):
    return HTMLResponse(paginas.pagina_login(cliente.login_url))


@app.get("/login")
def login(cliente: VibeCheckClient = Depends(get_cliente)):
    return RedirectResponse(cliente.login_url)


@app.post("/logout")
def logout(request: Request, cliente: VibeCheckClient = Depends(get_cliente)):
    cliente.logout(dict(request.cookies))
    return RedirectResponse("/", status_code=303)


# ---------------------------------------------
# Dashboard
# ---------------------------------------------

@app.get("/dashboard", response_class=HTMLResponse)
def dashboard_page(
    request: Request,
    periodo: Periodo = Periodo.ALL,
    turma: str = "all",
    tipo: str = "all",
    cliente: VibeCheckClient = Depends(get_cliente),
):
    cookies = dict(request.cookies)
    turmas = _carregar_turmas(cliente, cookies)
    try:
        pontos = _pontos(cliente, cookies, periodo, turma, tipo, turmas=turmas)
    except ErroApi as e:
        html = paginas.pagina_dashboard([], [], turmas, periodo.value, turma, tipo, erro=e.mensagem)
        return HTMLResponse(html, status_code=502)
    html = paginas.pagina_dashboard(pontos, available_emotions(pontos), turmas, periodo.value, turma, tipo)
    return HTMLResponse(html)


@app.get("/api/dashboard")
def dados_dashboard(
    request: Request,
    periodo: Periodo = Periodo.ALL,
    turma: str = "all",
    tipo: str = "all",
    cliente: VibeCheckClient = Depends(get_cliente),
):
    return _pontos(cliente, dict(request.cookies), periodo, turma, tipo)


@app.get("/api/dashboard/series", response_model=List[SerieEmocao])
def series_dashboard(
    request: Request,
    periodo: Periodo = Periodo.ALL,
    turma: str = "all",
    tipo: str = "all",
    cliente: VibeCheckClient = Depends(get_cliente),
):
    pontos = _pontos(cliente, dict(request.cookies), periodo, turma, tipo)
    return [SerieEmocao(emocao=e, cor=emotion_color(e)) for e in available_emotions(pontos)]


@app.get("/api/dashboard/exportar")
def exportar_dashboard(
    request: Request,
    periodo: Periodo = Periodo.ALL,
    turma: str = "all",
    tipo: str = "all",
    cliente: VibeCheckClient = Depends(get_cliente),
):
    pontos = _pontos(cliente, dict(request.cookies), periodo, turma, tipo)
    if not pontos:
        return JSONResponse({"status": "aviso", "mensagem": "Não há dados para exportar."}, status_code=404)
    return PlainTextResponse(
        export_text(pontos),
        headers={"Content-Disposition": 'attachment; filename="dados_grafico.txt"'},
    )


# ---------------------------------------------
# Turmas
# ---------------------------------------------

@app.get("/api/turmas", response_model=List[Turma])
def listar_turmas(request: Request, busca: str = "", cliente: VibeCheckClient = Depends(get_cliente)):
    turmas = cliente.listar_turmas(dict(request.cookies))
    busca = busca.lower()
    return [t for t in turmas if busca in str(t["nome"]).lower()]


@app.put("/api/turmas/{turma_id}")
def editar_turma(
    turma_id: int,
    edicao: EdicaoTurma,
    request: Request,
    cliente: VibeCheckClient = Depends(get_cliente),
):
    nome = edicao.nome.strip()
    if not nome:
        return _erro("Nome da turma não pode ser vazio.", 422)
    cliente.editar_turma(turma_id, nome, dict(request.cookies))
    return {"status": "ok", "turma": {"id": turma_id, "nome": nome}}


@app.delete("/api/turmas/{turma_id}")
def apagar_turma(turma_id: int, request: Request, cliente: VibeCheckClient = Depends(get_cliente)):
    cliente.apagar_turma(turma_id, dict(request.cookies))
    return {"status": "ok", "mensagem": "Turma apagada."}


@app.post("/api/codigo/{rota}", response_model=CodigoLiberado)
def liberar_codigo(
    rota: RotaCodigo,
    liberacao: LiberacaoCodigo,
    request: Request,
    cliente: VibeCheckClient = Depends(get_cliente),
):
    nome = liberacao.nomeTurma.strip()
    if not nome:
        return _erro("Por favor, selecione ou crie uma turma.", 422)
    codigo = cliente.liberar_codigo(nome, rota.tipo, dict(request.cookies))
    return CodigoLiberado(codigo=None if codigo is None else str(codigo), tipo=rota.tipo, turma=nome)


# ---------------------------------------------
# Liberação de códigos (páginas do professor)
# ---------------------------------------------

def _pagina_codigo(request, cliente, rota, turma="", codigo=None, erros=None, status_code=200):
    turmas = _carregar_turmas(cliente, dict(request.cookies))
    html = paginas.pagina_codigo(rota.tipo, turmas, turma=turma, codigo=codigo, erros=erros)
    return HTMLResponse(html, status_code=status_code)


def _liberar(request, cliente, rota, turma):
    if not turma.strip():
        erros = {"turma": "Por favor, selecione ou crie uma turma."}
        return _pagina_codigo(request, cliente, rota, turma, erros=erros, status_code=400)
    try:
        codigo = cliente.liberar_codigo(turma.strip(), rota.tipo, dict(request.cookies))
    except ErroApi:
        erros = {"geral": MENSAGENS_LIBERACAO[rota.tipo]}
        return _pagina_codigo(request, cliente, rota, turma, erros=erros, status_code=502)
    return _pagina_codigo(request, cliente, rota, codigo=codigo)


@app.get("/checkin", response_class=HTMLResponse)
def checkin_page(request: Request, cliente: VibeCheckClient = Depends(get_cliente)):
    return _pagina_codigo(request, cliente, RotaCodigo.checkin)


@app.post("/checkin", response_class=HTMLResponse)
def liberar_checkin(request: Request, turma: str = Form(""), cliente: VibeCheckClient = Depends(get_cliente)):
    return _liberar(request, cliente, RotaCodigo.checkin, turma)


@app.get("/checkout", response_class=HTMLResponse)
def checkout_page(request: Request, cliente: VibeCheckClient = Depends(get_cliente)):
    return _pagina_codigo(request, cliente, RotaCodigo.checkout)


@app.post("/checkout", response_class=HTMLResponse)
def liberar_checkout(request: Request, turma: str = Form(""), cliente: VibeCheckClient = Depends(get_cliente)):
    return _liberar(request, cliente, RotaCodigo.checkout, turma)


@app.post("/{rota}/turmas/{turma_id}/editar", response_class=HTMLResponse)
def editar_turma_form(
    rota: RotaCodigo,
    turma_id: int,
    request: Request,
    nome: str = Form(""),
    cliente: VibeCheckClient = Depends(get_cliente),
):
    if not nome.strip():
        erros = {"turma": "Nome da turma não pode ser vazio."}
        return _pagina_codigo(request, cliente, rota, erros=erros, status_code=400)
    try:
        cliente.editar_turma(turma_id, nome.strip(), dict(request.cookies))
    except ErroApi:
        erros = {"geral": "Erro ao editar turma. Tente novamente."}
        return _pagina_codigo(request, cliente, rota, erros=erros, status_code=502)
    return RedirectResponse(f"/{rota.value}", status_code=303)


@app.get("/{rota}/turmas/{turma_id}/apagar", response_class=HTMLResponse)
def confirmar_exclusao(
    rota: RotaCodigo,
    turma_id: int,
    request: Request,
    cliente: VibeCheckClient = Depends(get_cliente),
):
    turmas = _carregar_turmas(cliente, dict(request.cookies))
    for t in turmas:
        if t["id"] == turma_id:
            return HTMLResponse(paginas.pagina_confirmar_exclusao(rota.tipo, t))
    return RedirectResponse(f"/{rota.value}", status_code=303)


@app.post("/{rota}/turmas/{turma_id}/apagar", response_class=HTMLResponse)
def apagar_turma_form(
    rota: RotaCodigo,
    turma_id: int,
    request: Request,
    cliente: VibeCheckClient = Depends(get_cliente),
):
    try:
        cliente.apagar_turma(turma_id, dict(request.cookies))
    except ErroApi:
        erros = {"geral": "Erro ao apagar turma. Tente novamente."}
        return _pagina_codigo(request, cliente, rota, erros=erros, status_code=502)
    return RedirectResponse(f"/{rota.value}", status_code=303)


# ---------------------------------------------
# Fluxo do aluno: código -> emoji -> confirmação
# ---------------------------------------------

@app.get("/check", response_class=HTMLResponse)
def check_page():
    return HTMLResponse(paginas.pagina_check())


@app.post("/check", response_class=HTMLResponse)
def verificar_codigo(request: Request, codigo: str = Form(""), cliente: VibeCheckClient = Depends(get_cliente)):
    codigo = codigo.strip()
    if not codigo:
        return HTMLResponse(paginas.pagina_check(erro="Por favor, informe um código válido."), status_code=400)
    try:
        valido = cliente.verificar_codigo(codigo, dict(request.cookies))
    except ErroApi:
        html = paginas.pagina_check(codigo, erro="Erro ao verificar o código. Tente novamente.")
        return HTMLResponse(html, status_code=502)
    if not valido:
        return HTMLResponse(paginas.pagina_check(codigo, erro="Código inválido ou expirado."), status_code=400)

    sessao = SessaoCookie(request)
    sessao.set(config.CODIGO_COOKIE, codigo, config.CODIGO_TTL_SEGUNDOS)
    return sessao.aplicar(RedirectResponse("/emoji", status_code=303))


@app.get("/emoji", response_class=HTMLResponse)
def emoji_page():
    return HTMLResponse(paginas.pagina_emoji())


@app.post("/emoji", response_class=HTMLResponse)
def registrar_emocao(request: Request, emocao: str = Form(""), cliente: VibeCheckClient = Depends(get_cliente)):
    if emocao not in VALORES_EMOCAO:
        return HTMLResponse(paginas.pagina_emoji(erro="Selecione um emoji."), status_code=400)

    sessao = SessaoCookie(request)
    codigo = sessao.get(config.CODIGO_COOKIE)
    if not codigo:
        erro = "Código de avaliação não encontrado. Por favor, volte e insira novamente."
        return HTMLResponse(paginas.pagina_emoji(emocao, erro=erro), status_code=400)

    try:
        cliente.registrar_emocao(codigo, int(emocao), dict(request.cookies))
    except ErroApi:
        html = paginas.pagina_emoji(emocao, erro="Erro ao registrar emoção. Tente novamente.")
        return HTMLResponse(html, status_code=502)

    sessao.clear(config.CODIGO_COOKIE)
    return sessao.aplicar(RedirectResponse("/confirmacao", status_code=303))


@app.get("/confirmacao", response_class=HTMLResponse)
def confirmacao_page():
    return HTMLResponse(paginas.pagina_confirmacao())


@app.on_event("shutdown")
def shutdown_event():
    logger.info("[SHUTDOWN] Encerrando sessão HTTP com o backend...")
    cliente.session.close()
