# database/receitas.py
import logging
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from typing import Dict, List, Optional
from sqlalchemy import select

from utils.helpers import calcular_valor_total, converter_data
from .exceptions import ValidationError
from .models import orgaos, receitas, tipos_servicos, usuarios
from .queries import atualizar as _atualizar, buscar_linhas, buscar_unica, colunas_relacao, inserir

logger = logging.getLogger(__name__)

RELACOES = ("orgao", "tipo_servico", "usuario_registro")


def _select_completo():
    """SELECT de receitas com órgão, tipo de serviço e o usuário que registrou (id, nome, email)."""
    juncao = (
        receitas
        .outerjoin(orgaos, receitas.c.orgao_id == orgaos.c.id)
        .outerjoin(tipos_servicos, receitas.c.tipo_servico_id == tipos_servicos.c.id)
        .outerjoin(usuarios, receitas.c.usuario_registro_id == usuarios.c.id)
    )
    return (
        select(
            *receitas.c,
            *colunas_relacao(orgaos, "orgao"),
            *colunas_relacao(tipos_servicos, "tipo_servico"),
            *colunas_relacao(usuarios, "usuario_registro", ("id", "nome", "email")),
        )
        .select_from(juncao)
    )


def _aplicar_filtros(query, orgao_id=None, tipo_servico_id=None, usuario_id=None,
                     data_inicio=None, data_fim=None):
    """
    Aplica os filtros em conjunto (AND). Filtros vazios não restringem nada.
    As datas são limites inclusivos: uma data de calendário em 'data_fim'
    inclui todo o dia.
    """
    if orgao_id:
        query = query.where(receitas.c.orgao_id == orgao_id)
    if tipo_servico_id:
        query = query.where(receitas.c.tipo_servico_id == tipo_servico_id)
    if usuario_id:
        query = query.where(receitas.c.usuario_registro_id == usuario_id)

    inicio = _converter_data_informada(data_inicio, "data_inicio")
    if inicio:
        if not isinstance(inicio, datetime):
            inicio = datetime.combine(inicio, time.min)
        query = query.where(receitas.c.data_recebimento >= inicio)

    fim = _converter_data_informada(data_fim, "data_fim")
    if fim:
        if isinstance(fim, datetime):
            query = query.where(receitas.c.data_recebimento <= fim)
        else:
            dia_seguinte = datetime.combine(fim + timedelta(days=1), time.min)
            query = query.where(receitas.c.data_recebimento < dia_seguinte)

    return query


def _converter_data_informada(valor, campo: str):
    try:
        return converter_data(valor)
    except ValueError as e:
        logger.error(f"Data inválida em '{campo}': {valor!r}")
        raise ValidationError(f"Data inválida em '{campo}': {valor}. Use o formato AAAA-MM-DD.") from e


def _calcular_total(quantidade, valor_unitario) -> Decimal:
    try:
        return calcular_valor_total(quantidade, valor_unitario)
    except (ValueError, ArithmeticError) as e:
        logger.error(f"Não foi possível calcular o total de {quantidade!r} x {valor_unitario!r}: {e}")
        raise ValidationError("Quantidade ou valor unitário inválido.") from e


def _normalizar_valores(dados: Dict) -> Dict:
    for campo in ("valor_unitario", "valor_total"):
        if dados.get(campo) is not None and not isinstance(dados[campo], Decimal):
            try:
                dados[campo] = Decimal(str(dados[campo]))
            except (ValueError, ArithmeticError) as e:
                logger.error(f"Valor inválido em '{campo}': {dados[campo]!r}")
                raise ValidationError(f"Valor inválido em '{campo}': {dados[campo]}") from e

    if dados.get("data_recebimento"):
        recebimento = _converter_data_informada(dados["data_recebimento"], "data_recebimento")
        if isinstance(recebimento, date) and not isinstance(recebimento, datetime):
            recebimento = datetime.combine(recebimento, time.min)
        dados["data_recebimento"] = recebimento
    return dados


async def buscar_todos(orgao_id: Optional[str] = None, tipo_servico_id: Optional[str] = None,
                       usuario_id: Optional[str] = None, data_inicio=None, data_fim=None) -> List[Dict]:
    """Busca as receitas filtradas, da mais recente para a mais antiga."""
    query = _aplicar_filtros(
        _select_completo(), orgao_id, tipo_servico_id, usuario_id, data_inicio, data_fim
    ).order_by(receitas.c.data_recebimento.desc())

    return await buscar_linhas(query, RELACOES, "Erro ao buscar receitas")


async def buscar_por_id(receita_id: str) -> Dict:
    query = _select_completo().where(receitas.c.id == receita_id)
    return await buscar_unica(query, RELACOES, "receita")


async def criar(receita: Dict) -> Dict:
    """Cria uma receita. Sem 'valor_total' informado, ele é calculado como quantidade * valor_unitario."""
    dados = _normalizar_valores(dict(receita))

    if dados.get("valor_total") is None and dados.get("quantidade") is not None \
            and dados.get("valor_unitario") is not None:
        dados["valor_total"] = _calcular_total(dados["quantidade"], dados["valor_unitario"])

    if not dados.get("data_recebimento"):
        dados["data_recebimento"] = datetime.now(timezone.utc)

    novo_id = await inserir(receitas, dados, "receita")
    return await buscar_por_id(novo_id)


async def atualizar(receita_id: str, alteracoes: Dict) -> Dict:
    """
    Atualiza parcialmente uma receita.

    Se quantidade ou valor_unitario mudarem sem um valor_total explícito, o total
    é recalculado a partir dos valores gravados no banco combinados com os novos.
    """
    dados = _normalizar_valores(dict(alteracoes))

    if ("quantidade" in dados or "valor_unitario" in dados) and dados.get("valor_total") is None:
        query = select(receitas.c.quantidade, receitas.c.valor_unitario).where(receitas.c.id == receita_id)
        atual = await buscar_unica(query, descricao="receita")

        quantidade = dados["quantidade"] if "quantidade" in dados else atual["quantidade"]
        valor_unitario = dados["valor_unitario"] if "valor_unitario" in dados else atual["valor_unitario"]
        dados["valor_total"] = _calcular_total(quantidade, valor_unitario)

    if dados:
        await _atualizar(receitas, receita_id, dados, "receita")
    return await buscar_por_id(receita_id)


async def obter_totais(orgao_id: Optional[str] = None, tipo_servico_id: Optional[str] = None,
                       data_inicio=None, data_fim=None) -> Dict:
    """
    Soma o valor_total e conta as receitas que atendem aos filtros.

    Retorna {"valor_total": float, "quantidade": int}; 'valor_total' é o
    equivalente em snake_case da chave 'valorTotal'.
    """
    query = _aplicar_filtros(select(receitas.c.valor_total), orgao_id, tipo_servico_id,
                             data_inicio=data_inicio, data_fim=data_fim)
    linhas = await buscar_linhas(query, mensagem="Erro ao obter totais de receitas")

    valor_total = sum((Decimal(str(linha["valor_total"])) for linha in linhas), Decimal("0"))
    return {
        "valor_total": float(valor_total),
        "quantidade": len(linhas)
    }
