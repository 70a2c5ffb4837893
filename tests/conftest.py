# tests/conftest.py
import os
import tempfile

# O banco de testes precisa estar definido antes de qualquer import de database.db_manager.
# Por padrão é um arquivo SQLite temporário; TEST_DATABASE_URL permite apontar para um PostgreSQL.
_diretorio_testes = tempfile.mkdtemp(prefix="receita_municipal_")
os.environ["DATABASE_URL"] = (
    os.getenv("TEST_DATABASE_URL")
    or f"sqlite:///{os.path.join(_diretorio_testes, 'testes.db')}"
)
os.environ["SESSAO_CHAVE_SECRETA"] = "chave-secreta-de-testes"
os.environ["SESSAO_VALIDADE_MINUTOS"] = "60"
