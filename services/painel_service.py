# services/painel_service.py
import asyncio
import logging
from typing import Dict

from database import orgaos, receitas, relatorios, tipos_servicos, usuarios

logger = logging.getLogger(__name__)


async def _carregar_em_paralelo(**consultas) -> Dict:
    """
    Executa as consultas ao mesmo tempo. A falha de uma não cancela as outras;
    depois que todas terminam, o primeiro erro encontrado é relançado.
    """
    nomes = list(consultas)
    resultados = await asyncio.gather(*consultas.values(), return_exceptions=True)

    erros = [(nome, r) for nome, r in zip(nomes, resultados) if isinstance(r, Exception)]
    for nome, erro in erros:
        logger.error(f"Erro ao carregar '{nome}': {erro}")
    if erros:
        raise erros[0][1]

    return dict(zip(nomes, resultados))


async def carregar_painel() -> Dict:
    """Dados da página inicial da administração: órgãos e usuários ativos."""
    return await _carregar_em_paralelo(
        orgaos=orgaos.buscar_todos(),
        usuarios=usuarios.buscar_todos()
    )


async def carregar_dados_relatorios() -> Dict:
    """Dados da página de relatórios: relatórios salvos e as opções de filtro ativas."""
    return await _carregar_em_paralelo(
        relatorios=relatorios.buscar_todos(),
        orgaos=orgaos.buscar_todos(apenas_ativos=True),
        tipos_servicos=tipos_servicos.buscar_todos(apenas_ativos=True)
    )


async def carregar_dados_receitas() -> Dict:
    """Dados da página de receitas: todas as receitas e as opções ativas para o cadastro."""
    return await _carregar_em_paralelo(
        receitas=receitas.buscar_todos(),
        orgaos=orgaos.buscar_todos(apenas_ativos=True),
        tipos_servicos=tipos_servicos.buscar_todos(apenas_ativos=True)
    )


async def carregar_dados_usuarios() -> Dict:
    # Inclui usuários inativos, para que possam ser reativados
    return await _carregar_em_paralelo(
        usuarios=usuarios.buscar_todos(apenas_ativos=False),
        orgaos=orgaos.buscar_todos(apenas_ativos=True)
    )
