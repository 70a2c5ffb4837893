# tests/test_integration/test_usuarios.py
import pytest

from database import usuarios
from database.init_db import criar_admin_inicial
from database.exceptions import InvalidCredentials, StoreError, ValidationError
from services import sessao_service
from utils.helpers import gerar_hash_senha


@pytest.mark.asyncio
async def test_criar_usuario_grava_apenas_o_hash(operador):
    assert operador["senha_hash"] == gerar_hash_senha("senha123")
    assert operador["senha_hash"] != "senha123"
    assert operador["data_criacao"] is not None
    assert operador["ultimo_acesso"] is None


@pytest.mark.asyncio
async def test_usuario_traz_o_orgao_vinculado(operador, orgao):
    encontrado = await usuarios.buscar_por_id(operador["id"])
    assert encontrado["orgao"]["id"] == orgao["id"]
    assert encontrado["orgao"]["nome"] == orgao["nome"]


@pytest.mark.asyncio
async def test_usuario_sem_orgao():
    admin = await usuarios.criar({
        "nome": "Admin", "email": "admin@receita.gov.ao",
        "senha_hash": "admin", "nivel_acesso": "admin"
    })
    assert admin["orgao"] is None


@pytest.mark.asyncio
async def test_atualizar_sem_senha_preserva_hash(operador):
    atualizado = await usuarios.atualizar(operador["id"], {"nome": "Maria Souza", "senha_hash": ""})
    assert atualizado["nome"] == "Maria Souza"
    assert atualizado["senha_hash"] == gerar_hash_senha("senha123")


@pytest.mark.asyncio
async def test_atualizar_com_nova_senha(operador):
    atualizado = await usuarios.atualizar(operador["id"], {"senha_hash": "nova-senha"})
    assert atualizado["senha_hash"] == gerar_hash_senha("nova-senha")

    autenticado = await usuarios.autenticar("maria@lobito.gov.ao", "nova-senha")
    assert autenticado["id"] == operador["id"]


@pytest.mark.asyncio
async def test_autenticar_com_sucesso_registra_ultimo_acesso(operador, orgao):
    autenticado = await usuarios.autenticar("maria@lobito.gov.ao", "senha123")
    assert autenticado["id"] == operador["id"]
    assert autenticado["orgao"]["id"] == orgao["id"]
    assert autenticado["ultimo_acesso"] is not None

    gravado = await usuarios.buscar_por_id(operador["id"])
    assert gravado["ultimo_acesso"] is not None


@pytest.mark.asyncio
async def test_falha_ao_registrar_ultimo_acesso_nao_impede_login(monkeypatch, operador):
    async def falhar(*args, **kwargs):
        raise StoreError("banco somente leitura")

    monkeypatch.setattr(usuarios, "_atualizar", falhar)

    autenticado = await usuarios.autenticar("maria@lobito.gov.ao", "senha123")
    assert autenticado["id"] == operador["id"]
    assert autenticado["ultimo_acesso"] is None


@pytest.mark.asyncio
async def test_falhas_de_autenticacao_sao_indistinguiveis(operador):
    with pytest.raises(InvalidCredentials) as senha_errada:
        await usuarios.autenticar("maria@lobito.gov.ao", "senha-errada")
    with pytest.raises(InvalidCredentials) as email_inexistente:
        await usuarios.autenticar("ninguem@lobito.gov.ao", "senha123")

    assert str(senha_errada.value) == str(email_inexistente.value)


@pytest.mark.asyncio
async def test_usuario_inativo_nao_autentica(operador):
    await usuarios.atualizar(operador["id"], {"ativo": False})
    with pytest.raises(InvalidCredentials):
        await usuarios.autenticar("maria@lobito.gov.ao", "senha123")


@pytest.mark.asyncio
async def test_filtros_de_usuarios(operador, orgao):
    await usuarios.criar({
        "nome": "Gestor", "email": "gestor@receita.gov.ao",
        "senha_hash": "gestor", "nivel_acesso": "gestor"
    })

    assert len(await usuarios.buscar_todos()) == 2
    assert [u["id"] for u in await usuarios.buscar_todos(nivel_acesso="operador")] == [operador["id"]]
    assert [u["id"] for u in await usuarios.buscar_todos(orgao_id=orgao["id"])] == [operador["id"]]


@pytest.mark.asyncio
async def test_email_duplicado_falha(operador):
    with pytest.raises(ValidationError):
        await usuarios.criar({
            "nome": "Outra Maria", "email": "maria@lobito.gov.ao",
            "senha_hash": "x", "nivel_acesso": "operador"
        })


@pytest.mark.asyncio
async def test_nivel_de_acesso_invalido_falha():
    with pytest.raises(ValidationError):
        await usuarios.criar({
            "nome": "Visitante", "email": "visitante@receita.gov.ao",
            "senha_hash": "x", "nivel_acesso": "visitante"
        })


@pytest.mark.asyncio
async def test_buscar_por_email(operador):
    assert (await usuarios.buscar_por_email("maria@lobito.gov.ao"))["id"] == operador["id"]
    assert await usuarios.buscar_por_email("ninguem@lobito.gov.ao") is None


@pytest.mark.asyncio
async def test_iniciar_sessao_emite_token_valido(operador):
    dados, token = await sessao_service.iniciar_sessao("maria@lobito.gov.ao", "senha123")
    assert dados["id"] == operador["id"]
    assert "senha_hash" not in dados
    assert sessao_service.validar_token(token) == dados


@pytest.mark.asyncio
async def test_iniciar_sessao_com_senha_errada(operador):
    with pytest.raises(InvalidCredentials):
        await sessao_service.iniciar_sessao("maria@lobito.gov.ao", "errada")


@pytest.mark.asyncio
async def test_criar_admin_inicial(monkeypatch):
    monkeypatch.setenv("ADMIN_EMAIL", "admin@receita.gov.ao")
    monkeypatch.setenv("ADMIN_SENHA", "troque-me")
    monkeypatch.delenv("ADMIN_NOME", raising=False)

    admin = await criar_admin_inicial()
    assert admin["nivel_acesso"] == "admin"
    assert admin["nome"] == "Administrador"

    # Segunda execução não duplica
    assert await criar_admin_inicial() is None
    assert (await usuarios.autenticar("admin@receita.gov.ao", "troque-me"))["id"] == admin["id"]
