import argparse
import json
import logging
import sys

import config
from agregacao import Periodo, TipoEvento, aggregate, export_text
from cliente_api import ErroApi, VibeCheckClient


logger = logging.getLogger("vibecheck.exportar")


def _cookies(valores):
    cookies = {}
    for valor in valores or []:
        nome, sep, conteudo = valor.partition("=")
        if not sep or not nome:
            raise argparse.ArgumentTypeError(f"cookie inválido: {valor!r} (use NOME=VALOR)")
        cookies[nome] = conteudo
    return cookies


def build_parser():
    parser = argparse.ArgumentParser(
        description="Exporta o relatório de emoções do Vibe Check em texto.",
    )
    parser.add_argument("--periodo", choices=[p.value for p in Periodo], default=Periodo.ALL.value)
    parser.add_argument("--turma", help="nome exato da turma")
    parser.add_argument("--tipo", choices=[t.value for t in TipoEvento])
    parser.add_argument("--arquivo", help="JSON com os eventos; sem ele os dados vêm do backend")
    parser.add_argument("--saida", help="arquivo de saída (padrão: stdout)")
    parser.add_argument("--cookie", action="append", metavar="NOME=VALOR", help="cookie de sessão do backend")
    parser.add_argument("--api", default=config.API_BASE, help="URL base do backend")
    return parser


def carregar_eventos(args):
    if args.arquivo:
        with open(args.arquivo, encoding="utf-8") as f:
            return json.load(f)
    cliente = VibeCheckClient(api_url=args.api)
    return cliente.eventos_dashboard(cookies=_cookies(args.cookie))


def main(argv=None):
    logging.basicConfig(level=config.LOG_LEVEL, format="[%(levelname)s] %(message)s")
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        eventos = carregar_eventos(args)
    except argparse.ArgumentTypeError as e:
        parser.error(str(e))
    except ErroApi as e:
        logger.error("[EXPORTAR] %s", e.mensagem)
        return 1
    except (OSError, ValueError) as e:
        logger.error("[EXPORTAR] Não foi possível ler %s: %s", args.arquivo, e)
        return 1

    pontos = aggregate(eventos, args.periodo, args.turma, args.tipo)
    if not pontos:
        logger.error("[EXPORTAR] Não há dados para exportar.")
        return 1

    texto = export_text(pontos)
    if args.saida:
        with open(args.saida, "w", encoding="utf-8") as f:
            f.write(texto)
        logger.info("[EXPORTAR] %d período(s) gravado(s) em %s", len(pontos), args.saida)
    else:
        sys.stdout.write(texto)
    return 0


if __name__ == "__main__":
    sys.exit(main())
