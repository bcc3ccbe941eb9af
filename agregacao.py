import logging
import math
import re
from collections.abc import Mapping
from datetime import datetime
from enum import Enum
from typing import Iterable, List, Optional


logger = logging.getLogger(__name__)

FORMATO_DATA = "%d/%m/%Y %H:%M"
CHAVE_PERIODO = "week"

EMOTION_LABELS = {
    1: "Muito Feliz",
    2: "Feliz",
    3: "Desmotivado",
    4: "Indiferente",
    5: "Surpreso",
    6: "Triste",
    7: "Irritado",
    8: "Ansioso",
    9: "Apaixonado",
}

EMOTION_COLORS = {
    "Muito Feliz": "#4ade80",
    "Feliz": "#86efac",
    "Desmotivado": "#a3a3a3",
    "Indiferente": "#d4d4d4",
    "Surpreso": "#fbbf24",
    "Triste": "#60a5fa",
    "Irritado": "#f87171",
    "Ansioso": "#c084fc",
    "Apaixonado": "#f472b6",
}
COR_PADRAO = "#999999"

# Valores de filtro que significam "sem restrição"
SENTINELAS = {"", "all", "none"}

_MES_ANO = re.compile(r"([0-9]{2})/([0-9]{4})")
_DIA_MES = re.compile(r"([0-9]{2})/([0-9]{2})")
_DATA_HORA = re.compile(r"[0-9]{2}/[0-9]{2}/[0-9]{4} [0-9]{2}:[0-9]{2}")

_LABELS_POR_TEXTO = {str(codigo): label for codigo, label in EMOTION_LABELS.items()}


class Periodo(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    ALL = "all"


class TipoEvento(str, Enum):
    CHECKIN = "CHECKIN"
    CHECKOUT = "CHECKOUT"


def _valor(filtro):
    if filtro is None:
        return None
    if isinstance(filtro, Enum):
        filtro = filtro.value
    filtro = str(filtro)
    if filtro.strip().lower() in SENTINELAS:
        return None
    return filtro


def _emotion_label(codigo):
    # Códigos em texto só valem na forma exata ("2"); "02", " 2" e "²" ficam de fora
    if isinstance(codigo, str):
        return _LABELS_POR_TEXTO.get(codigo)
    if isinstance(codigo, bool):
        return None
    if isinstance(codigo, float):
        if not codigo.is_integer():
            return None
        codigo = int(codigo)
    if not isinstance(codigo, int):
        return None
    return EMOTION_LABELS.get(codigo)


def week_number(momento: datetime) -> int:
    """
    Numeração simples de semanas (não ISO): dias decorridos desde 1º de janeiro,
    mais o dia da semana de 1º de janeiro (domingo = 0), mais 1, dividido por 7
    e arredondado para cima. As horas entram como fração de dia.
    """
    inicio = datetime(momento.year, 1, 1)
    dias = (momento - inicio).total_seconds() / 86400
    deslocamento = (inicio.weekday() + 1) % 7
    return math.ceil((dias + deslocamento + 1) / 7)


def period_label(momento: datetime, periodo) -> str:
    try:
        periodo = Periodo(periodo)
    except ValueError:
        logger.debug("[AGREGACAO] Período desconhecido %r, agrupando por semana.", periodo)
        periodo = Periodo.WEEK

    if periodo is Periodo.DAY:
        return momento.strftime("%d/%m")
    if periodo is Periodo.MONTH:
        return momento.strftime("%m/%Y")
    return f"Semana {week_number(momento)}"


def sort_key(label):
    """Chave numérica de ordenação derivada do formato do rótulo."""
    label = str(label)
    if label.startswith("Semana"):
        resto = label[len("Semana"):].strip()
        if not resto:
            return 0
        try:
            n = float(resto)
        except ValueError:
            return 0
        return 0 if math.isnan(n) else n

    encontrado = _MES_ANO.fullmatch(label)
    if encontrado:
        mes, ano = (int(parte) for parte in encontrado.groups())
        return ano * 100 + mes

    # dd/MM ignora o ano: registros de anos diferentes ordenam só por mês e dia
    encontrado = _DIA_MES.fullmatch(label)
    if encontrado:
        dia, mes = (int(parte) for parte in encontrado.groups())
        return mes * 100 + dia

    return 0


def aggregate(
    records: Iterable[Mapping],
    period=Periodo.ALL,
    class_filter: Optional[str] = None,
    type_filter=None,
) -> List[dict]:
    """
    Agrupa eventos de check-in/check-out por período e conta cada emoção.

    Cada registro segue o contrato do backend: ``data`` ("dd/MM/yyyy HH:mm"),
    ``emocao`` (1..9), ``turma`` e ``tipo``. Registros com data inválida ou
    emoção desconhecida são descartados. Retorna uma lista de pontos
    ``{"week": rotulo, <emocao>: contagem, ...}`` ordenada pelo rótulo.
    """
    turma = _valor(class_filter)
    tipo = _valor(type_filter)

    agrupado = {}
    descartados = 0

    for item in records or ():
        if not isinstance(item, Mapping):
            descartados += 1
            continue
        if turma is not None and item.get("turma") != turma:
            continue
        if tipo is not None and item.get("tipo") != tipo:
            continue

        data = item.get("data")
        try:
            if not isinstance(data, str) or not _DATA_HORA.fullmatch(data):
                raise ValueError(data)
            momento = datetime.strptime(data, FORMATO_DATA)
        except ValueError:
            logger.warning("[AGREGACAO] Registro com data inválida ignorado: %r", data)
            descartados += 1
            continue

        emocao = _emotion_label(item.get("emocao"))
        if emocao is None:
            descartados += 1
            continue

        rotulo = period_label(momento, period)
        ponto = agrupado.setdefault(rotulo, {CHAVE_PERIODO: rotulo})
        ponto[emocao] = ponto.get(emocao, 0) + 1

    if descartados:
        logger.info("[AGREGACAO] %d registro(s) descartado(s).", descartados)

    return sorted(agrupado.values(), key=lambda ponto: sort_key(ponto[CHAVE_PERIODO]))


def available_emotions(points: Iterable[Mapping]) -> List[str]:
    emocoes = []
    for ponto in points:
        for chave in ponto:
            if chave != CHAVE_PERIODO and chave not in emocoes:
                emocoes.append(chave)
    return emocoes


def emotion_color(emocao: str) -> str:
    return EMOTION_COLORS.get(emocao, COR_PADRAO)


def export_text(points: Iterable[Mapping]) -> str:
    """Relatório texto: rótulo do período seguido de uma linha por emoção."""
    linhas = []
    for ponto in points:
        linhas.append(f"{ponto[CHAVE_PERIODO]}:")
        for chave, valor in ponto.items():
            if chave != CHAVE_PERIODO:
                linhas.append(f"  {chave}: {valor}")
        linhas.append("")
    return "".join(linha + "\n" for linha in linhas)
