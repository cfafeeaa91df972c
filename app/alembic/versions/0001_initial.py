"""initial

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None

JSONType = postgresql.JSONB(astext_type=sa.Text()).with_variant(sa.JSON(), "sqlite")


def upgrade() -> None:
    op.create_table(
        "demandas",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("tag", sa.String(length=100), nullable=True),
        sa.Column("funcionario_id", sa.Integer(), nullable=False),
        sa.Column("nome_funcionario", sa.String(length=255), nullable=False),
        sa.Column("email_funcionario", sa.String(length=320), nullable=False),
        sa.Column("categoria", sa.String(length=150), nullable=False),
        sa.Column("prioridade", sa.String(length=30), nullable=False),
        sa.Column("complexidade", sa.String(length=30), nullable=False),
        sa.Column("descricao", sa.Text(), nullable=False),
        sa.Column("local", sa.String(length=255), nullable=False),
        sa.Column("nome_demanda", sa.String(length=255), nullable=True),
        sa.Column("data_criacao", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("data_limite", sa.Date(), nullable=False),
        sa.Column("data_atualizacao", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column("data_conclusao", sa.DateTime(timezone=True), nullable=True),
        sa.Column("status", sa.String(length=50), nullable=False, server_default="pendente"),
        sa.Column("is_rotina", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("dias_semana", JSONType, nullable=False),
        sa.Column("atribuidos", JSONType, nullable=False),
        sa.Column("anexos_criacao", JSONType, nullable=False),
        sa.Column("anexos_resolucao", JSONType, nullable=False),
        sa.Column("comentarios", sa.Text(), nullable=True, server_default=""),
        sa.Column("comentario_gestor", sa.Text(), nullable=True, server_default=""),
        sa.Column("comentario_reprovacao_atribuicao", sa.Text(), nullable=True, server_default=""),
        sa.Column("criado_por", sa.Integer(), nullable=True),
        sa.Column("atualizado_por", sa.Integer(), nullable=True),
        sa.UniqueConstraint("tag"),
    )
    op.create_index("ix_demandas_status", "demandas", ["status"], unique=False)
    op.create_index("ix_demandas_funcionario_id", "demandas", ["funcionario_id"], unique=False)
    op.create_index("ix_demandas_data_limite", "demandas", ["data_limite"], unique=False)
    op.create_index("ix_demandas_categoria", "demandas", ["categoria"], unique=False)
    op.create_index("ix_demandas_prioridade", "demandas", ["prioridade"], unique=False)
    op.create_index("ix_demandas_data_criacao", "demandas", ["data_criacao"], unique=False)

    op.create_table(
        "usuarios",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=False, nullable=False),
        sa.Column("nome", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("senha_hash", sa.String(length=255), nullable=False),
        sa.Column("nivel", sa.String(length=50), nullable=True),
        sa.Column("pontos", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("conquistas", JSONType, nullable=False),
        sa.Column("role", sa.String(length=20), nullable=False, server_default="funcionario"),
        sa.UniqueConstraint("nome"),
    )
    op.create_index("ix_usuarios_email", "usuarios", ["email"], unique=True)

    op.create_table(
        "auditoria",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("acao", sa.String(length=20), nullable=False),
        sa.Column("tabela", sa.String(length=100), nullable=False),
        sa.Column("registro_id", sa.Integer(), nullable=False),
        sa.Column("dados_antigos", JSONType, nullable=True),
        sa.Column("dados_novos", JSONType, nullable=True),
        sa.Column("usuario_id", sa.Integer(), nullable=True),
        sa.Column("data_hora", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("ip", sa.String(length=64), nullable=True),
    )
    op.create_index("ix_auditoria_tabela_registro", "auditoria", ["tabela", "registro_id"], unique=False)

    op.create_table(
        "feedbacks",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("funcionario_id", sa.Integer(), nullable=False),
        sa.Column("gestor_id", sa.Integer(), nullable=False),
        sa.Column("tipo", sa.String(length=20), nullable=False),
        sa.Column("mensagem", sa.Text(), nullable=False),
        sa.Column("data_criacao", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_feedbacks_funcionario_id", "feedbacks", ["funcionario_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_feedbacks_funcionario_id", table_name="feedbacks")
    op.drop_table("feedbacks")
    op.drop_index("ix_auditoria_tabela_registro", table_name="auditoria")
    op.drop_table("auditoria")
    op.drop_index("ix_usuarios_email", table_name="usuarios")
    op.drop_table("usuarios")
    op.drop_index("ix_demandas_data_criacao", table_name="demandas")
    op.drop_index("ix_demandas_prioridade", table_name="demandas")
    op.drop_index("ix_demandas_categoria", table_name="demandas")
    op.drop_index("ix_demandas_data_limite", table_name="demandas")
    op.drop_index("ix_demandas_funcionario_id", table_name="demandas")
    op.drop_index("ix_demandas_status", table_name="demandas")
    op.drop_table("demandas")
