from dotenv import load_dotenv
import os

load_dotenv()


def _env_int(name, default):
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_float(name, default):
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _env_csv(name, default_csv):
    value = os.getenv(name, default_csv)
    return [item.strip() for item in value.split(",") if item.strip()]


# Backend que concentra autenticação, códigos e persistência
API_BASE = os.getenv("API_BASE", "http://localhost:8080").rstrip("/")
API_TIMEOUT = _env_float("API_TIMEOUT", 5.0)

CORS_ORIGINS = _env_csv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000")

# O código de avaliação do aluno vale ~30 minutos
CODIGO_COOKIE = "codigo_avaliacao"
CODIGO_TTL_SEGUNDOS = _env_int("CODIGO_TTL_SEGUNDOS", 1800)

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
