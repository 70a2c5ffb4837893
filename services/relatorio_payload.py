"""
services.relatorio_payload: estrutura do conteúdo de um relatório de receitas.

O resultado de um relatório é gravado como uma captura imutável (coluna JSON
'resultados'). A captura carrega o número de versão do formato, para que
relatórios antigos continuem legíveis se a estrutura mudar.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional

from utils.helpers import para_json

VERSAO_ATUAL = 1


@dataclass
class TotaisRelatorio:
    valor_total: float
    quantidade: int


@dataclass
class PeriodoRelatorio:
    data_inicio: str                # ISO (aaaa-mm-dd)
    data_fim: str


@dataclass
class GrupoOrgao:
    """Receitas de um mesmo órgão, com soma e contagem."""
    nome: Optional[str]
    tipo: Optional[str]
    valor_total: float = 0.0
    quantidade: int = 0
    receitas: List[Dict] = field(default_factory=list)


@dataclass
class ResultadoRelatorio:
    receitas: List[Dict]
    receitas_por_orgao: Dict[str, GrupoOrgao]
    totais: TotaisRelatorio
    periodo: PeriodoRelatorio
    versao: int = VERSAO_ATUAL

    def para_dict(self) -> Dict:
        """Representação pronta para a coluna JSON (Decimal e datas viram texto)."""
        return para_json(asdict(self))

    @classmethod
    def de_dict(cls, dados: Dict) -> "ResultadoRelatorio":
        if not isinstance(dados, dict):
            raise ValueError("Conteúdo do relatório não é um objeto.")

        versao = dados.get("versao")
        if versao != VERSAO_ATUAL:
            raise ValueError(f"Versão de relatório não suportada: {versao}")

        return cls(
            receitas=list(dados["receitas"]),
            receitas_por_orgao={
                orgao_id: GrupoOrgao(**grupo)
                for orgao_id, grupo in dados["receitas_por_orgao"].items()
            },
            totais=TotaisRelatorio(**dados["totais"]),
            periodo=PeriodoRelatorio(**dados["periodo"]),
            versao=versao,
        )


def agrupar_por_orgao(receitas: List[Dict]) -> Dict[str, GrupoOrgao]:
    """Agrupa as receitas pelo orgao_id, somando valor_total e contando as receitas de cada órgão."""
    grupos: Dict[str, GrupoOrgao] = {}

    for receita in receitas:
        orgao_id = receita["orgao_id"]
        if orgao_id not in grupos:
            orgao = receita.get("orgao") or {}
            grupos[orgao_id] = GrupoOrgao(nome=orgao.get("nome"), tipo=orgao.get("tipo"))

        grupo = grupos[orgao_id]
        # Soma em Decimal para não acumular erro de ponto flutuante entre as parcelas
        soma = Decimal(str(grupo.valor_total)) + Decimal(str(receita["valor_total"]))
        grupo.valor_total = float(soma)
        grupo.quantidade += 1
        grupo.receitas.append(receita)

    return grupos
