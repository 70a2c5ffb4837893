# tests/test_integration/conftest.py
import pytest_asyncio

from database.db_manager import database
from database.init_db import criar_tabelas, remover_tabelas
from database import orgaos, tipos_servicos, usuarios


# --- Fixture de Conexão e Limpeza ---
@pytest_asyncio.fixture(scope="function", autouse=True)
async def db_connection():
    """
    Conecta ao banco de TESTES e recria todas as tabelas antes de cada teste,
    garantindo isolamento entre eles.
    """
    await database.connect()
    await remover_tabelas()
    await criar_tabelas()

    yield

    await database.disconnect()


# --- Fixtures de Dados de Teste ---
@pytest_asyncio.fixture(scope="function")
async def orgao():
    return await orgaos.criar({"nome": "Administração Municipal do Lobito", "tipo": "municipal"})


@pytest_asyncio.fixture(scope="function")
async def outro_orgao():
    return await orgaos.criar({"nome": "Governo Provincial de Benguela", "tipo": "provincial"})


@pytest_asyncio.fixture(scope="function")
async def tipo_servico():
    return await tipos_servicos.criar({
        "nome": "Emissão de Licença Comercial",
        "descricao": "Licenciamento de estabelecimentos",
        "categoria": "Licenças"
    })


@pytest_asyncio.fixture(scope="function")
async def operador(orgao):
    return await usuarios.criar({
        "nome": "Maria Operadora",
        "email": "maria@lobito.gov.ao",
        "senha_hash": "senha123",
        "nivel_acesso": "operador",
        "orgao_id": orgao["id"]
    })
