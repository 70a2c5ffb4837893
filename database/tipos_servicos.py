# database/tipos_servicos.py
import logging
from collections import defaultdict
from typing import Dict, List, Optional
from sqlalchemy import select

from .models import tipos_servicos
from .queries import atualizar as _atualizar, buscar_linhas, buscar_unica, inserir

logger = logging.getLogger(__name__)


async def buscar_todos(apenas_ativos: bool = True, categoria: Optional[str] = None) -> List[Dict]:
    query = select(*tipos_servicos.c)

    if apenas_ativos:
        query = query.where(tipos_servicos.c.ativo.is_(True))
    if categoria:
        query = query.where(tipos_servicos.c.categoria == categoria)

    return await buscar_linhas(query, mensagem="Erro ao buscar tipos de serviços")


async def buscar_por_id(tipo_servico_id: str) -> Dict:
    query = select(*tipos_servicos.c).where(tipos_servicos.c.id == tipo_servico_id)
    return await buscar_unica(query, descricao="tipo de serviço")


async def criar(tipo_servico: Dict) -> Dict:
    dados = dict(tipo_servico)
    dados.setdefault("ativo", True)
    novo_id = await inserir(tipos_servicos, dados, "tipo de serviço")
    return await buscar_por_id(novo_id)


async def atualizar(tipo_servico_id: str, alteracoes: Dict) -> Dict:
    if alteracoes:
        await _atualizar(tipos_servicos, tipo_servico_id, dict(alteracoes), "tipo de serviço")
    return await buscar_por_id(tipo_servico_id)


def agrupar_por_categoria(tipos: List[Dict]) -> Dict[str, List[Dict]]:
    """Agrupa os tipos de serviço pela categoria (texto livre, sem normalização)."""
    grupos = defaultdict(list)
    for tipo in tipos:
        grupos[tipo["categoria"]].append(tipo)
    return dict(grupos)


def listar_categorias(tipos: List[Dict]) -> List[str]:
    """Lista as categorias existentes, sem repetição e em ordem alfabética."""
    return sorted({tipo["categoria"] for tipo in tipos if tipo.get("categoria")})
