# database/orgaos.py
import logging
from typing import Dict, List, Optional
from sqlalchemy import select

from .models import orgaos
from .queries import atualizar as _atualizar, buscar_linhas, buscar_unica, inserir

logger = logging.getLogger(__name__)


async def buscar_todos(apenas_ativos: bool = True, tipo: Optional[str] = None) -> List[Dict]:
    """Busca os órgãos, por padrão apenas os ativos, opcionalmente filtrando pelo tipo."""
    query = select(*orgaos.c)

    if apenas_ativos:
        query = query.where(orgaos.c.ativo.is_(True))
    if tipo:
        query = query.where(orgaos.c.tipo == tipo)

    return await buscar_linhas(query, mensagem="Erro ao buscar órgãos")


async def buscar_por_id(orgao_id: str) -> Dict:
    query = select(*orgaos.c).where(orgaos.c.id == orgao_id)
    return await buscar_unica(query, descricao="órgão")


async def criar(orgao: Dict) -> Dict:
    """Cria um novo órgão e retorna a linha gravada."""
    dados = dict(orgao)
    dados.setdefault("ativo", True)
    novo_id = await inserir(orgaos, dados, "órgão")
    return await buscar_por_id(novo_id)


async def atualizar(orgao_id: str, alteracoes: Dict) -> Dict:
    """
    Atualiza parcialmente um órgão. Desativar é feito com {"ativo": False};
    não existe exclusão física.
    """
    if alteracoes:
        await _atualizar(orgaos, orgao_id, dict(alteracoes), "órgão")
    return await buscar_por_id(orgao_id)
