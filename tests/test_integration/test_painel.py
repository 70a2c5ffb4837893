# tests/test_integration/test_painel.py
import pytest

from database import orgaos, receitas, tipos_servicos, usuarios
from database.exceptions import StoreError
from services import painel_service


@pytest.mark.asyncio
async def test_carregar_painel(orgao, operador):
    dados = await painel_service.carregar_painel()
    assert [o["id"] for o in dados["orgaos"]] == [orgao["id"]]
    assert [u["id"] for u in dados["usuarios"]] == [operador["id"]]


@pytest.mark.asyncio
async def test_carregar_dados_relatorios(orgao, tipo_servico):
    inativo = await orgaos.criar({"nome": "Órgão Extinto", "tipo": "comunal", "ativo": False})

    dados = await painel_service.carregar_dados_relatorios()
    assert dados["relatorios"] == []
    assert [o["id"] for o in dados["orgaos"]] == [orgao["id"]]
    assert inativo["id"] not in [o["id"] for o in dados["orgaos"]]
    assert [t["id"] for t in dados["tipos_servicos"]] == [tipo_servico["id"]]


@pytest.mark.asyncio
async def test_falha_de_uma_consulta_nao_cancela_as_outras(monkeypatch, orgao):
    concluidas = []
    buscar_orgaos = orgaos.buscar_todos

    async def buscar_orgaos_registrando(**filtros):
        resultado = await buscar_orgaos(**filtros)
        concluidas.append("orgaos")
        return resultado

    async def falhar(**filtros):
        raise StoreError("tabela tipos_servicos não existe")

    monkeypatch.setattr(orgaos, "buscar_todos", buscar_orgaos_registrando)
    monkeypatch.setattr(tipos_servicos, "buscar_todos", falhar)

    with pytest.raises(StoreError):
        await painel_service.carregar_dados_relatorios()

    assert concluidas == ["orgaos"]


@pytest.mark.asyncio
async def test_carregar_dados_receitas(orgao, tipo_servico, operador):
    receita = await receitas.criar({
        "orgao_id": orgao["id"], "tipo_servico_id": tipo_servico["id"],
        "quantidade": 2, "valor_unitario": "50.00", "usuario_registro_id": operador["id"]
    })
    await tipos_servicos.criar({"nome": "Taxa Antiga", "categoria": "Taxas", "ativo": False})

    dados = await painel_service.carregar_dados_receitas()
    assert [r["id"] for r in dados["receitas"]] == [receita["id"]]
    assert [o["id"] for o in dados["orgaos"]] == [orgao["id"]]
    assert [t["id"] for t in dados["tipos_servicos"]] == [tipo_servico["id"]]


@pytest.mark.asyncio
async def test_carregar_dados_usuarios_inclui_inativos(orgao, operador):
    afastado = await usuarios.criar({
        "nome": "João Afastado", "email": "joao@lobito.gov.ao",
        "senha_hash": "x", "nivel_acesso": "operador", "ativo": False
    })

    dados = await painel_service.carregar_dados_usuarios()
    assert {u["id"] for u in dados["usuarios"]} == {operador["id"], afastado["id"]}
    assert [o["id"] for o in dados["orgaos"]] == [orgao["id"]]
