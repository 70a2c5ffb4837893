# utils/helpers.py
import hashlib
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Optional, Union

CENTAVOS = Decimal("0.01")


def gerar_hash_senha(senha: str) -> str:
    """
    Gera o hash SHA-256 (hexadecimal, 64 caracteres) de uma senha.
    Sem salt: o mesmo texto sempre produz o mesmo hash, que é o que permite
    a comparação direta no banco durante a autenticação.
    """
    return hashlib.sha256(senha.encode("utf-8")).hexdigest()


def calcular_valor_total(quantidade, valor_unitario) -> Decimal:
    """Calcula quantidade * valor_unitario, arredondado para 2 casas decimais."""
    total = Decimal(str(quantidade)) * Decimal(str(valor_unitario))
    return total.quantize(CENTAVOS, rounding=ROUND_HALF_UP)


def converter_data(valor) -> Optional[Union[date, datetime]]:
    """Converte uma string ISO (ex: "2024-01-31" ou "2024-01-31T10:00:00") para date/datetime."""
    if not valor:
        return None
    if isinstance(valor, (date, datetime)):
        return valor

    s = str(valor).strip()
    # Apenas a parte da data: tratamos como dia de calendário
    if len(s) == 10:
        return date.fromisoformat(s)
    return datetime.fromisoformat(s)


def formatar_moeda(valor) -> str:
    """Formata um valor em kwanzas no padrão '1.234,50 Kz'."""
    numero = Decimal(str(valor or 0)).quantize(CENTAVOS, rounding=ROUND_HALF_UP)
    texto = f"{numero:,.2f}"
    # Troca os separadores do padrão americano pelo padrão português
    texto = texto.replace(",", "X").replace(".", ",").replace("X", ".")
    return f"{texto} Kz"


def formatar_data(valor) -> str:
    """Formata data e hora como 'dd/mm/aaaa hh:mm'."""
    data = converter_data(valor)
    if data is None:
        return ""
    if not isinstance(data, datetime):
        data = datetime(data.year, data.month, data.day)
    return data.strftime("%d/%m/%Y %H:%M")


def formatar_data_simples(valor) -> str:
    data = converter_data(valor)
    return data.strftime("%d/%m/%Y") if data else ""


def para_json(valor: Any) -> Any:
    """Converte recursivamente Decimal e datas para tipos aceitos em uma coluna JSON."""
    if isinstance(valor, dict):
        return {str(chave): para_json(item) for chave, item in valor.items()}
    if isinstance(valor, (list, tuple)):
        return [para_json(item) for item in valor]
    if isinstance(valor, Decimal):
        return str(valor)
    if isinstance(valor, (date, datetime)):
        return valor.isoformat()
    return valor
