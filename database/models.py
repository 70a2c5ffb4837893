# database/models.py
import sqlalchemy
from sqlalchemy.dialects.postgresql import JSONB

# O 'metadata' é um objeto que armazena todas as informações sobre as nossas tabelas.
metadata = sqlalchemy.MetaData()

TIPOS_ORGAO = ("provincial", "municipal", "comunal")
NIVEIS_ACESSO = ("admin", "gestor", "operador")

# JSONB no PostgreSQL, JSON genérico nos demais bancos (ex.: SQLite dos testes)
JSONType = sqlalchemy.JSON().with_variant(JSONB, "postgresql")


def _valores_permitidos(coluna: str, valores: tuple) -> str:
    return f"{coluna} IN ({', '.join(repr(v) for v in valores)})"


# Órgãos emissores (provincial, municipal ou comunal), com hierarquia opcional
orgaos = sqlalchemy.Table(
    "orgaos",
    metadata,
    sqlalchemy.Column("id", sqlalchemy.String(36), primary_key=True),
    sqlalchemy.Column("nome", sqlalchemy.String(255), nullable=False),
    sqlalchemy.Column("tipo", sqlalchemy.String(50), nullable=False),
    sqlalchemy.Column("orgao_superior_id", sqlalchemy.String(36), sqlalchemy.ForeignKey("orgaos.id"), nullable=True),
    sqlalchemy.Column("ativo", sqlalchemy.Boolean, nullable=False, default=True, server_default=sqlalchemy.true()),
    sqlalchemy.CheckConstraint(_valores_permitidos("tipo", TIPOS_ORGAO), name="ck_orgaos_tipo"),
)

usuarios = sqlalchemy.Table(
    "usuarios",
    metadata,
    sqlalchemy.Column("id", sqlalchemy.String(36), primary_key=True),
    sqlalchemy.Column("nome", sqlalchemy.String(255), nullable=False),
    sqlalchemy.Column("email", sqlalchemy.String(255), nullable=False, unique=True),
    sqlalchemy.Column("senha_hash", sqlalchemy.String(255), nullable=False),
    sqlalchemy.Column("nivel_acesso", sqlalchemy.String(50), nullable=False),
    sqlalchemy.Column("orgao_id", sqlalchemy.String(36), sqlalchemy.ForeignKey("orgaos.id"), nullable=True),
    sqlalchemy.Column("ativo", sqlalchemy.Boolean, nullable=False, default=True, server_default=sqlalchemy.true()),
    sqlalchemy.Column("data_criacao", sqlalchemy.DateTime(timezone=True), server_default=sqlalchemy.func.now()),
    sqlalchemy.Column("ultimo_acesso", sqlalchemy.DateTime(timezone=True)),
    sqlalchemy.CheckConstraint(_valores_permitidos("nivel_acesso", NIVEIS_ACESSO), name="ck_usuarios_nivel_acesso"),
)

# A categoria é texto livre, usada apenas para agrupar na interface
tipos_servicos = sqlalchemy.Table(
    "tipos_servicos",
    metadata,
    sqlalchemy.Column("id", sqlalchemy.String(36), primary_key=True),
    sqlalchemy.Column("nome", sqlalchemy.String(255), nullable=False),
    sqlalchemy.Column("descricao", sqlalchemy.Text),
    sqlalchemy.Column("categoria", sqlalchemy.String(100), nullable=False),
    sqlalchemy.Column("ativo", sqlalchemy.Boolean, nullable=False, default=True, server_default=sqlalchemy.true()),
)

receitas = sqlalchemy.Table(
    "receitas",
    metadata,
    sqlalchemy.Column("id", sqlalchemy.String(36), primary_key=True),
    sqlalchemy.Column("orgao_id", sqlalchemy.String(36), sqlalchemy.ForeignKey("orgaos.id"), nullable=False),
    sqlalchemy.Column("tipo_servico_id", sqlalchemy.String(36), sqlalchemy.ForeignKey("tipos_servicos.id"), nullable=False),
    sqlalchemy.Column("quantidade", sqlalchemy.Integer, nullable=False),
    sqlalchemy.Column("valor_unitario", sqlalchemy.Numeric(12, 2), nullable=False),
    sqlalchemy.Column("valor_total", sqlalchemy.Numeric(12, 2), nullable=False),
    sqlalchemy.Column("referencia", sqlalchemy.String(255)),
    sqlalchemy.Column("observacoes", sqlalchemy.Text),
    sqlalchemy.Column("usuario_registro_id", sqlalchemy.String(36), sqlalchemy.ForeignKey("usuarios.id")),
    sqlalchemy.Column("data_recebimento", sqlalchemy.DateTime(timezone=True), nullable=False),
    sqlalchemy.CheckConstraint("quantidade > 0", name="ck_receitas_quantidade"),
    sqlalchemy.CheckConstraint("valor_unitario >= 0", name="ck_receitas_valor_unitario"),
    sqlalchemy.CheckConstraint("valor_total >= 0", name="ck_receitas_valor_total"),
)

# Relatórios salvos: 'filtros' e 'resultados' são capturas imutáveis do momento da geração
relatorios = sqlalchemy.Table(
    "relatorios",
    metadata,
    sqlalchemy.Column("id", sqlalchemy.String(36), primary_key=True),
    sqlalchemy.Column("titulo", sqlalchemy.String(255), nullable=False),
    sqlalchemy.Column("descricao", sqlalchemy.Text),
    sqlalchemy.Column("data_inicio", sqlalchemy.Date, nullable=False),
    sqlalchemy.Column("data_fim", sqlalchemy.Date, nullable=False),
    sqlalchemy.Column("usuario_id", sqlalchemy.String(36), sqlalchemy.ForeignKey("usuarios.id")),
    sqlalchemy.Column("filtros", JSONType),
    sqlalchemy.Column("resultados", JSONType),
    sqlalchemy.Column("data_geracao", sqlalchemy.DateTime(timezone=True), nullable=False),
)
