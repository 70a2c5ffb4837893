# services/relatorio_service.py
import io
import json
import logging
from datetime import date, datetime
from typing import Dict, Optional, Tuple

from database import receitas, relatorios
from database.exceptions import ValidationError
from services.pdf_service import gerar_pdf_relatorio
from services.relatorio_payload import (
    PeriodoRelatorio, ResultadoRelatorio, TotaisRelatorio, agrupar_por_orgao
)
from utils.helpers import converter_data, formatar_data, formatar_data_simples

logger = logging.getLogger(__name__)


def _somente_data(valor) -> date:
    return valor.date() if isinstance(valor, datetime) else valor


async def gerar_relatorio(usuario_id: Optional[str], data_inicio, data_fim,
                          orgao_id: Optional[str] = None, tipo_servico_id: Optional[str] = None,
                          titulo: Optional[str] = None, descricao: Optional[str] = None
                          ) -> Tuple[Dict, ResultadoRelatorio]:
    """
    Gera um relatório de receitas para o período (obrigatório) e filtros opcionais,
    grava a captura como um novo relatório e devolve (relatorio_salvo, resultado).
    """
    if not usuario_id:
        raise ValidationError("Usuário não autenticado. Faça login novamente.")
    if not data_inicio or not data_fim:
        raise ValidationError("Período de datas é obrigatório para gerar relatório.")

    try:
        inicio = _somente_data(converter_data(data_inicio))
        fim = _somente_data(converter_data(data_fim))
    except ValueError as e:
        logger.error(f"Período inválido para o relatório: {data_inicio!r} a {data_fim!r}")
        raise ValidationError("Período de datas inválido. Use o formato AAAA-MM-DD.") from e

    lista_receitas = await receitas.buscar_todos(
        orgao_id=orgao_id,
        tipo_servico_id=tipo_servico_id,
        data_inicio=inicio,
        data_fim=fim
    )

    # Os totais consideram apenas órgão e período, sem o filtro de tipo de serviço.
    # TODO: confirmar com a área de receitas se os totais devem respeitar o tipo de serviço.
    totais = await receitas.obter_totais(orgao_id=orgao_id, data_inicio=inicio, data_fim=fim)

    resultado = ResultadoRelatorio(
        receitas=lista_receitas,
        receitas_por_orgao=agrupar_por_orgao(lista_receitas),
        totais=TotaisRelatorio(**totais),
        periodo=PeriodoRelatorio(data_inicio=inicio.isoformat(), data_fim=fim.isoformat())
    )

    relatorio = await relatorios.criar({
        "titulo": titulo or f"Relatório de Receitas ({formatar_data(datetime.now())})",
        "descricao": descricao or (
            f"Relatório de receitas no período de {formatar_data_simples(inicio)} "
            f"a {formatar_data_simples(fim)}"
        ),
        "data_inicio": inicio,
        "data_fim": fim,
        "usuario_id": usuario_id,
        "filtros": {"orgao_id": orgao_id, "tipo_servico_id": tipo_servico_id},
        "resultados": resultado.para_dict()
    })

    logger.info(
        f"Relatório {relatorio['id']} gerado por {usuario_id}: "
        f"{resultado.totais.quantidade} receita(s), {len(resultado.receitas_por_orgao)} órgão(s)."
    )
    return relatorio, resultado


def _resultado_salvo(relatorio: Dict) -> ResultadoRelatorio:
    """Lê a captura gravada no relatório, sem recalcular nada."""
    try:
        dados = relatorio.get("resultados")
        if isinstance(dados, str):
            dados = json.loads(dados)
        return ResultadoRelatorio.de_dict(dados)
    except (ValueError, KeyError, TypeError) as e:
        logger.error(f"Erro ao analisar os resultados do relatório {relatorio.get('id')}: {e}", exc_info=True)
        raise ValidationError("O relatório possui um formato inválido.") from e


async def visualizar_relatorio(relatorio_id: str) -> ResultadoRelatorio:
    relatorio = await relatorios.buscar_por_id(relatorio_id)
    return _resultado_salvo(relatorio)


async def exportar_relatorio_pdf(relatorio_id: str) -> io.BytesIO:
    """Gera o PDF de um relatório salvo, a partir da captura gravada."""
    relatorio = await relatorios.buscar_por_id(relatorio_id)
    resultado = _resultado_salvo(relatorio)
    return gerar_pdf_relatorio(relatorio, resultado)
