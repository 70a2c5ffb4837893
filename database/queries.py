# database/queries.py
"""
Funções auxiliares compartilhadas pelos módulos de tabela (orgaos, usuarios,
tipos_servicos, receitas, relatorios).

Cada consulta é montada com o SQLAlchemy Core e executada pela instância
global 'database'. Erros do driver são registrados no log e relançados
como StoreError / ValidationError / NotFoundError.
"""
import logging
import sqlite3
import uuid
from typing import Dict, Iterable, List, Optional
from asyncpg.exceptions import IntegrityConstraintViolationError
from sqlalchemy import Table, insert, update
from sqlalchemy.exc import ArgumentError, CompileError

from .db_manager import database
from .exceptions import NotFoundError, StoreError, ValidationError

logger = logging.getLogger(__name__)

# Erros que indicam dado inválido (restrição violada ou coluna inexistente),
# tanto no PostgreSQL (asyncpg) quanto no SQLite usado nos testes.
ERROS_VALIDACAO = (IntegrityConstraintViolationError, sqlite3.IntegrityError, CompileError, ArgumentError)


def traduzir_erro(e: Exception, mensagem: str) -> StoreError:
    if isinstance(e, ERROS_VALIDACAO):
        return ValidationError(f"{mensagem}: {e}")
    return StoreError(f"{mensagem}: {e}")


def colunas_relacao(tabela: Table, relacao: str, nomes: Optional[Iterable[str]] = None) -> List:
    """
    Seleciona as colunas de uma tabela relacionada com o rótulo '<relacao>__<coluna>',
    para depois serem aninhadas no registro principal por 'aninhar'.
    """
    return [
        coluna.label(f"{relacao}__{coluna.name}")
        for coluna in tabela.c
        if nomes is None or coluna.name in nomes
    ]


def aninhar(registro: Dict, relacao: str) -> Dict:
    """Move as chaves '<relacao>__*' para um dicionário em registro[relacao] (None se o join não encontrou nada)."""
    prefixo = f"{relacao}__"
    dados = {
        chave[len(prefixo):]: registro.pop(chave)
        for chave in list(registro)
        if chave.startswith(prefixo)
    }
    registro[relacao] = dados if dados.get("id") is not None else None
    return registro


async def buscar_linhas(query, relacoes: Iterable[str] = (), mensagem: str = "Erro ao consultar o banco") -> List[Dict]:
    """Executa um SELECT e devolve as linhas como dicionários simples."""
    chaves = [coluna.name for coluna in query.selected_columns]
    try:
        rows = await database.fetch_all(query)
    except Exception as e:
        logger.error(f"{mensagem}: {e}", exc_info=True)
        raise traduzir_erro(e, mensagem) from e

    registros = []
    for row in rows:
        registro = {chave: row[chave] for chave in chaves}
        for relacao in relacoes:
            aninhar(registro, relacao)
        registros.append(registro)
    return registros


async def buscar_unica(query, relacoes: Iterable[str] = (), descricao: str = "registro") -> Dict:
    """Executa um SELECT que deve retornar exatamente uma linha."""
    registros = await buscar_linhas(query, relacoes, f"Erro ao buscar {descricao}")
    if len(registros) != 1:
        logger.warning(f"Busca por {descricao} retornou {len(registros)} linha(s), esperada exatamente 1.")
        raise NotFoundError(f"{descricao.capitalize()} não encontrado(a).")
    return registros[0]


async def inserir(tabela: Table, registro: Dict, descricao: str) -> str:
    """Insere uma linha e retorna o ID gerado."""
    valores = dict(registro)
    if not valores.get("id"):
        valores["id"] = str(uuid.uuid4())

    try:
        await database.execute(insert(tabela).values(**valores))
    except Exception as e:
        logger.error(f"Erro ao criar {descricao}: {e}", exc_info=True)
        raise traduzir_erro(e, f"Erro ao criar {descricao}") from e

    logger.info(f"{descricao.capitalize()} criado(a) com ID {valores['id']}.")
    return valores["id"]


async def atualizar(tabela: Table, registro_id: str, alteracoes: Dict, descricao: str) -> None:
    """Aplica uma atualização parcial à linha com o ID informado (último a escrever prevalece)."""
    try:
        query = (
            update(tabela)
            .where(tabela.c.id == registro_id)
            .values(**alteracoes)
        )
        await database.execute(query)
    except Exception as e:
        logger.error(f"Erro ao atualizar {descricao} ID {registro_id}: {e}", exc_info=True)
        raise traduzir_erro(e, f"Erro ao atualizar {descricao}") from e
