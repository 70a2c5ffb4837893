# database/usuarios.py
import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional
from sqlalchemy import select

from utils.helpers import gerar_hash_senha
from .exceptions import InvalidCredentials, StoreError
from .models import orgaos, usuarios
from .queries import atualizar as _atualizar, buscar_linhas, buscar_unica, colunas_relacao, inserir

logger = logging.getLogger(__name__)


def _select_com_orgao():
    """SELECT de usuários já trazendo o órgão vinculado em 'orgao'."""
    return (
        select(*usuarios.c, *colunas_relacao(orgaos, "orgao"))
        .select_from(usuarios.outerjoin(orgaos, usuarios.c.orgao_id == orgaos.c.id))
    )


def _com_senha_criptografada(dados: Dict) -> Dict:
    """
    O chamador envia a senha em texto puro no campo 'senha_hash'.
    Ela é substituída pelo hash aqui, antes de qualquer escrita; sem senha nova
    o campo é removido para preservar o hash já gravado.
    """
    dados = dict(dados)
    if dados.get("senha_hash"):
        dados["senha_hash"] = gerar_hash_senha(dados["senha_hash"])
    else:
        dados.pop("senha_hash", None)
    return dados


async def buscar_todos(apenas_ativos: bool = True, nivel_acesso: Optional[str] = None,
                       orgao_id: Optional[str] = None) -> List[Dict]:
    query = _select_com_orgao()

    if apenas_ativos:
        query = query.where(usuarios.c.ativo.is_(True))
    if nivel_acesso:
        query = query.where(usuarios.c.nivel_acesso == nivel_acesso)
    if orgao_id:
        query = query.where(usuarios.c.orgao_id == orgao_id)

    return await buscar_linhas(query, ("orgao",), "Erro ao buscar usuários")


async def buscar_por_id(usuario_id: str) -> Dict:
    query = _select_com_orgao().where(usuarios.c.id == usuario_id)
    return await buscar_unica(query, ("orgao",), "usuário")


async def buscar_por_email(email: str) -> Optional[Dict]:
    """Busca um usuário pelo email (ativo ou não). Retorna None se não existir."""
    query = _select_com_orgao().where(usuarios.c.email == email)
    registros = await buscar_linhas(query, ("orgao",), "Erro ao buscar usuário por email")
    return registros[0] if registros else None


async def criar(usuario: Dict) -> Dict:
    dados = _com_senha_criptografada(usuario)
    dados.setdefault("ativo", True)
    dados.setdefault("data_criacao", datetime.now(timezone.utc))

    novo_id = await inserir(usuarios, dados, "usuário")
    return await buscar_por_id(novo_id)


async def atualizar(usuario_id: str, alteracoes: Dict) -> Dict:
    dados = _com_senha_criptografada(alteracoes)
    if dados:
        await _atualizar(usuarios, usuario_id, dados, "usuário")
    return await buscar_por_id(usuario_id)


async def autenticar(email: str, senha: str) -> Dict:
    """
    Autentica um usuário ativo por email e senha.

    Não distingue "email inexistente" de "senha errada": nos dois casos
    levanta InvalidCredentials com a mesma mensagem. Em caso de sucesso,
    registra o último acesso (sem invalidar o login se essa escrita falhar)
    e retorna o usuário com o órgão vinculado.
    """
    senha_hash = gerar_hash_senha(senha)
    query = _select_com_orgao().where(
        usuarios.c.email == email,
        usuarios.c.senha_hash == senha_hash,
        usuarios.c.ativo.is_(True)
    )
    registros = await buscar_linhas(query, ("orgao",), "Erro na autenticação")

    if len(registros) != 1:
        logger.warning(f"Tentativa de login sem sucesso para o email: {email}")
        raise InvalidCredentials()

    usuario = registros[0]
    agora = datetime.now(timezone.utc)
    try:
        await _atualizar(usuarios, usuario["id"], {"ultimo_acesso": agora}, "usuário")
        usuario["ultimo_acesso"] = agora
    except StoreError as e:
        logger.warning(f"Não foi possível registrar o último acesso do usuário {usuario['id']}: {e}")

    logger.info(f"Usuário {usuario['id']} autenticado com sucesso.")
    return usuario
