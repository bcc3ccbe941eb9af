from html import escape

from agregacao import EMOTION_LABELS, CHAVE_PERIODO, TipoEvento, emotion_color


PERIODOS = [("day", "Dia"), ("week", "Semana"), ("month", "Mês"), ("all", "Todos")]
TIPOS = [("all", "Todos os tipos"), ("CHECKIN", "Check-in"), ("CHECKOUT", "Check-out")]

BASE_HTML = """<!doctype html>
<html lang="pt-BR">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>%%TITULO%% | Vibe Check</title>
<style>body{font-family:system-ui;padding:24px;max-width:960px;margin:auto}
.erro{color:#b91c1c}.aviso{color:#a16207}.ok{color:#047857}
table{border-collapse:collapse}td,th{border:1px solid #ccc;padding:4px 8px}</style>
</head>
<body>
%%CORPO%%
</body>
</html>
"""

LOGOUT_HTML = """<form method="post" action="/logout"><button type="submit">Encerrar Sessão</button></form>"""


def _pagina(titulo, corpo):
    return BASE_HTML.replace("%%TITULO%%", escape(titulo)).replace("%%CORPO%%", corpo)


def _erro(mensagem, classe="erro"):
    if not mensagem:
        return ""
    return f'<p class="{classe}">{escape(mensagem)}</p>'


def _opcoes(opcoes, selecionado):
    return "".join(
        f'<option value="{escape(str(valor))}"{" selected" if str(valor) == str(selecionado) else ""}>{escape(str(texto))}</option>'
        for valor, texto in opcoes
    )


def pagina_login(login_url):
    corpo = f"""
<h1>Entre na sua conta</h1>
<p>Conecte-se usando sua conta do Google</p>
<a href="{escape(login_url)}"><button type="button">Entrar com Google</button></a>
"""
    return _pagina("Login", corpo)


def _tabela(pontos, emocoes):
    cabecalho = "".join(
        f'<th style="color:{emotion_color(e)}">{escape(e)}</th>' for e in emocoes
    )
    linhas = []
    for ponto in pontos:
        celulas = "".join(f"<td>{ponto.get(e, '')}</td>" for e in emocoes)
        linhas.append(f"<tr><td>{escape(ponto[CHAVE_PERIODO])}</td>{celulas}</tr>")
    return f"<table><tr><th>Período</th>{cabecalho}</tr>{''.join(linhas)}</table>"


def pagina_dashboard(pontos, emocoes, turmas, periodo="all", turma="all", tipo="all", erro=None):
    """Relatórios: filtros de período/turma/tipo, tabela do gráfico e exportação."""
    if erro:
        corpo = f"""
<h1>Erro</h1>
{_erro(erro)}
<a href="/dashboard"><button type="button">Tentar novamente</button></a>
<a href="/"><button type="button">Voltar ao início</button></a>
"""
        return _pagina("Relatórios", corpo)

    opcoes_turma = [("all", "Todas as turmas")]
    opcoes_turma += [(t['id'], t['nome']) for t in turmas]
    opcoes_turma.append(("none", "Nenhuma turma disponível"))

    filtros = f"""
<form method="get" action="/dashboard">
<select name="periodo">{_opcoes(PERIODOS, periodo)}</select>
<select name="turma">{_opcoes(opcoes_turma, turma)}</select>
<select name="tipo">{_opcoes(TIPOS, tipo)}</select>
<button type="submit">Filtrar</button>
</form>
"""
    consulta = f"periodo={escape(str(periodo))}&amp;turma={escape(str(turma))}&amp;tipo={escape(str(tipo))}"
    if pontos:
        grafico = _tabela(pontos, emocoes)
    else:
        grafico = '<p>Nenhum dado disponível</p><a href="/dashboard"><button type="button">Recarregar dados</button></a>'

    corpo = f"""
<nav><a href="/">Voltar</a> | <a href="/checkin">Ir para Check-in</a> | <a href="/checkout">Ir para Check-out</a></nav>
{LOGOUT_HTML}
<h1>Relatórios</h1>
{filtros}
<h2>Visualização Gráfica</h2>
{grafico}
<p><a href="/api/dashboard/exportar?{consulta}">Exportar dados (.txt)</a></p>
"""
    return _pagina("Relatórios", corpo)


def pagina_codigo(tipo, turmas, turma="", codigo=None, erros=None):
    """Liberação de código de check-in/check-out com a lista de turmas do professor."""
    tipo = TipoEvento(tipo)
    erros = erros or {}
    nome = "Check-In" if tipo is TipoEvento.CHECKIN else "Check-Out"
    rota = f"/{tipo.value.lower()}"

    itens = []
    for t in turmas:
        itens.append(f"""<li>{escape(t['nome'])}
<form method="post" action="{rota}/turmas/{t['id']}/editar" style="display:inline">
<input type="text" name="nome" value="{escape(t['nome'])}"><button type="submit">Salvar</button></form>
<a href="{rota}/turmas/{t['id']}/apagar">Remover</a></li>""")
    lista = f"<ul>{''.join(itens)}</ul>" if itens else ""
    datalist = "".join(f'<option value="{escape(t["nome"])}">' for t in turmas)

    resultado = ""
    if codigo:
        resultado = f'<div class="ok"><p>Código de {nome.lower()} gerado:</p><p><strong>{escape(str(codigo))}</strong></p></div>'

    corpo = f"""
<nav><a href="/dashboard">Voltar</a></nav>
{LOGOUT_HTML}
<h1>Liberar {nome}</h1>
<form method="post" action="{rota}">
<label for="turma">Turma</label>
<input id="turma" name="turma" type="text" list="turmas" placeholder="Digite uma turma" value="{escape(turma)}">
<datalist id="turmas">{datalist}</datalist>
{_erro(erros.get("turma"))}
<button type="submit">Liberar {nome}</button>
</form>
{_erro(erros.get("geral"))}
{resultado}
<h2>Turmas</h2>
{lista}
"""
    return _pagina(f"Liberar {nome}", corpo)


def pagina_confirmar_exclusao(tipo, turma):
    rota = f"/{TipoEvento(tipo).value.lower()}"
    corpo = f"""
<p>Tem certeza que quer apagar a turma "{escape(turma['nome'])}"?</p>
<form method="post" action="{rota}/turmas/{turma['id']}/apagar" style="display:inline">
<button type="submit">Sim</button></form>
<a href="{rota}"><button type="button">Não</button></a>
"""
    return _pagina("Apagar turma", corpo)


def pagina_check(codigo="", erro=None):
    corpo = f"""
<nav><a href="/">Voltar</a></nav>
{LOGOUT_HTML}
<h1>Vibe Check</h1>
<form method="post" action="/check">
<label for="codigo">Código</label>
<input id="codigo" name="codigo" type="text" value="{escape(codigo)}">
{_erro(erro)}
<button type="submit">Entrar</button>
</form>
"""
    return _pagina("Código", corpo)


def pagina_emoji(selecionado=None, erro=None):
    opcoes = []
    for emocao_id, label in EMOTION_LABELS.items():
        marcado = " checked" if str(emocao_id) == str(selecionado) else ""
        opcoes.append(f"""<label><input type="radio" name="emocao" value="{emocao_id}"{marcado}>
{escape(label)}</label>""")
    corpo = f"""
<nav><a href="/">Voltar</a></nav>
<h1>Qual emoji representa suas emoções agora?</h1>
<p title="Informações sobre emojis">Esse emoji nos ajuda a entender suas emoções antes/depois da prática.</p>
<form method="post" action="/emoji">
{''.join(opcoes)}
{_erro(erro)}
<button type="submit">Enviar</button>
</form>
"""
    return _pagina("Emoções", corpo)


def pagina_confirmacao():
    corpo = """
<a href="/"><button type="button">Encerrar Sessão</button></a>
<h2>Vibe Check finalizada com sucesso!</h2>
<form method="get" action="/check"><button type="submit">Iniciar outra prática</button></form>
"""
    return _pagina("Confirmação", corpo)
