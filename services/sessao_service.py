# services/sessao_service.py
"""
Sessões assinadas no servidor.

Após o login, os dados públicos do usuário ({id, nome, email, nivel_acesso,
orgao_id}) são entregues dentro de um token assinado com HMAC-SHA256 e com
validade. O token só é aceito de volta se a assinatura conferir e não tiver
expirado.
"""
import os
import hmac
import json
import base64
import hashlib
import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional, Tuple
from dotenv import load_dotenv

from database import usuarios

load_dotenv()

logger = logging.getLogger(__name__)

CAMPOS_SESSAO = ("id", "nome", "email", "nivel_acesso", "orgao_id")


class SessaoInvalida(Exception):
    """Token de sessão malformado, adulterado ou expirado."""


def _chave_secreta() -> bytes:
    chave = os.getenv("SESSAO_CHAVE_SECRETA")
    if not chave:
        raise ValueError("SESSAO_CHAVE_SECRETA não foi encontrada no arquivo .env")
    return chave.encode("utf-8")


def _validade() -> timedelta:
    return timedelta(minutes=int(os.getenv("SESSAO_VALIDADE_MINUTOS", "480")))


def _assinar(conteudo: bytes) -> str:
    return hmac.new(_chave_secreta(), conteudo, hashlib.sha256).hexdigest()


def montar_dados_sessao(usuario: Dict) -> Dict:
    """Seleciona apenas os campos do usuário que podem circular na sessão (nunca o hash da senha)."""
    return {campo: usuario.get(campo) for campo in CAMPOS_SESSAO}


def emitir_token(usuario: Dict, agora: Optional[datetime] = None) -> str:
    agora = agora or datetime.now(timezone.utc)
    dados = montar_dados_sessao(usuario)
    dados["exp"] = int((agora + _validade()).timestamp())

    conteudo = base64.urlsafe_b64encode(
        json.dumps(dados, separators=(",", ":"), sort_keys=True).encode("utf-8")
    )
    return f"{conteudo.decode('ascii')}.{_assinar(conteudo)}"


def validar_token(token: str, agora: Optional[datetime] = None) -> Dict:
    """Confere assinatura e validade do token e devolve os dados da sessão."""
    try:
        conteudo, assinatura = token.rsplit(".", 1)
        conteudo.encode("ascii")
        assinatura.encode("ascii")
    except (AttributeError, ValueError):
        raise SessaoInvalida("Token de sessão malformado.")

    if not hmac.compare_digest(assinatura, _assinar(conteudo.encode("ascii"))):
        logger.warning("Token de sessão com assinatura inválida.")
        raise SessaoInvalida("Assinatura do token de sessão inválida.")

    try:
        dados = json.loads(base64.urlsafe_b64decode(conteudo.encode("ascii")))
    except ValueError:
        raise SessaoInvalida("Token de sessão malformado.")

    agora = agora or datetime.now(timezone.utc)
    if int(dados.get("exp", 0)) <= agora.timestamp():
        raise SessaoInvalida("Sessão expirada. Faça login novamente.")

    return {campo: dados.get(campo) for campo in CAMPOS_SESSAO}


async def iniciar_sessao(email: str, senha: str) -> Tuple[Dict, str]:
    """Autentica o usuário e devolve (dados_sessao, token). Propaga InvalidCredentials."""
    usuario = await usuarios.autenticar(email, senha)
    return montar_dados_sessao(usuario), emitir_token(usuario)
