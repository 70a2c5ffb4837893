"""Inicializa o schema do banco da Receita Municipal."""

import os
import asyncio
import logging
from typing import Dict, Optional
from dotenv import load_dotenv
from sqlalchemy.schema import CreateTable, DropTable

from database.db_manager import database
from database.models import metadata
from database import usuarios

# Carrega variáveis do .env
load_dotenv()

logger = logging.getLogger(__name__)


async def criar_tabelas():
    """Cria as tabelas que ainda não existem, respeitando a ordem das chaves estrangeiras."""
    for tabela in metadata.sorted_tables:
        await database.execute(CreateTable(tabela, if_not_exists=True))
    logger.info("Tabelas criadas/verificadas com sucesso.")


async def remover_tabelas():
    """Remove todas as tabelas, na ordem inversa das dependências."""
    for tabela in reversed(metadata.sorted_tables):
        await database.execute(DropTable(tabela, if_exists=True))


async def criar_admin_inicial() -> Optional[Dict]:
    """Cria o administrador definido em ADMIN_EMAIL/ADMIN_SENHA, caso ainda não exista."""
    email = os.getenv("ADMIN_EMAIL")
    senha = os.getenv("ADMIN_SENHA")
    if not email or not senha:
        logger.info("ADMIN_EMAIL/ADMIN_SENHA não definidos; nenhum administrador criado.")
        return None

    if await usuarios.buscar_por_email(email):
        logger.info(f"Administrador {email} já existe.")
        return None

    admin = await usuarios.criar({
        "nome": os.getenv("ADMIN_NOME", "Administrador"),
        "email": email,
        "senha_hash": senha,
        "nivel_acesso": "admin"
    })
    logger.info(f"Administrador {email} criado.")
    return admin


async def run_schema_script():
    await database.connect()
    try:
        await criar_tabelas()
        await criar_admin_inicial()
    finally:
        await database.disconnect()


if __name__ == "__main__":
    from logging_config import configurar_logging

    configurar_logging()
    asyncio.run(run_schema_script())
