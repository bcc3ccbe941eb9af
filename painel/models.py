from pydantic import BaseModel
from typing import Optional

from agregacao import TipoEvento


class Turma(BaseModel):
    id: int
    nome: str


class LiberacaoCodigo(BaseModel):
    nomeTurma: str


class CodigoLiberado(BaseModel):
    codigo: Optional[str]
    tipo: TipoEvento
    turma: str


class EdicaoTurma(BaseModel):
    nome: str


class SerieEmocao(BaseModel):
    emocao: str
    cor: str
