# db_manager.py

import os
from databases import Database
from dotenv import load_dotenv

# Carrega as variáveis de ambiente do arquivo .env
load_dotenv()

# Pega a URL de conexão do ambiente (postgresql://... em produção, sqlite:///... localmente)
DATABASE_URL = os.getenv("DATABASE_URL")

# Sem URL o módulo de acesso a dados não tem como funcionar.
if not DATABASE_URL:
    raise ValueError("DATABASE_URL não foi encontrada no arquivo .env")

# Instância global do objeto Database, compartilhada por todos os módulos de tabela
# (orgaos, usuarios, tipos_servicos, receitas, relatorios).
database = Database(DATABASE_URL)
