# database/relatorios.py
import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional
from sqlalchemy import select

from utils.helpers import converter_data
from .exceptions import ValidationError
from .models import relatorios, usuarios
from .queries import atualizar as _atualizar, buscar_linhas, buscar_unica, colunas_relacao, inserir

logger = logging.getLogger(__name__)

# Apenas os metadados podem mudar; filtros, resultados e período são a captura do momento da geração
CAMPOS_EDITAVEIS = {"titulo", "descricao"}


def _select_com_usuario():
    return (
        select(*relatorios.c, *colunas_relacao(usuarios, "usuario", ("id", "nome", "email")))
        .select_from(relatorios.outerjoin(usuarios, relatorios.c.usuario_id == usuarios.c.id))
    )


async def buscar_todos(usuario_id: Optional[str] = None) -> List[Dict]:
    """Lista os relatórios salvos, do mais recente para o mais antigo."""
    query = _select_com_usuario().order_by(relatorios.c.data_geracao.desc())

    if usuario_id:
        query = query.where(relatorios.c.usuario_id == usuario_id)

    return await buscar_linhas(query, ("usuario",), "Erro ao buscar relatórios")


async def buscar_por_id(relatorio_id: str) -> Dict:
    query = _select_com_usuario().where(relatorios.c.id == relatorio_id)
    return await buscar_unica(query, ("usuario",), "relatório")


async def criar(relatorio: Dict) -> Dict:
    """Grava um novo relatório. Gerar de novo com os mesmos filtros sempre cria outro registro."""
    dados = dict(relatorio)
    for campo in ("data_inicio", "data_fim"):
        if dados.get(campo):
            dados[campo] = converter_data(dados[campo])
    dados.setdefault("data_geracao", datetime.now(timezone.utc))

    novo_id = await inserir(relatorios, dados, "relatório")
    return await buscar_por_id(novo_id)


async def atualizar(relatorio_id: str, alteracoes: Dict) -> Dict:
    proibidos = set(alteracoes) - CAMPOS_EDITAVEIS
    if proibidos:
        logger.warning(f"Tentativa de alterar campos congelados do relatório {relatorio_id}: {sorted(proibidos)}")
        raise ValidationError(f"Campos não editáveis em um relatório salvo: {', '.join(sorted(proibidos))}")

    if alteracoes:
        await _atualizar(relatorios, relatorio_id, dict(alteracoes), "relatório")
    return await buscar_por_id(relatorio_id)
