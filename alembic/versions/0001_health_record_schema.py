"""Health-record schema and the report aggregation function.

Revision ID: 0001
Revises:
Create Date: 2026-10-19 00:00:00.000000 UTC

Creates the tables the report service reads:
  - usuarios       (patient identity)
  - diarios        (free-text diary entries)
  - questionarios  (questionnaire answers and scores)
  - diagnosticos   (diagnosis descriptions)

and relatorio_usuario(id), which returns one row per patient with the three
collections aggregated as JSON arrays (empty arrays when there are no rows).

All ids referencing usuarios use VARCHAR(36) for cross-DB compatibility.
"""
from __future__ import annotations

import sqlalchemy as sa
from alembic import op

# ── Revision identifiers ──────────────────────────────────────────────────────
revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def _audit_columns() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    ]


def _owner_fk(table: str) -> sa.ForeignKeyConstraint:
    return sa.ForeignKeyConstraint(
        ["usuario_id"],
        ["usuarios.id"],
        name=f"fk_{table}_usuario_id",
        ondelete="CASCADE",
    )


RELATORIO_USUARIO = """
CREATE OR REPLACE FUNCTION relatorio_usuario(p_usuario_id varchar)
RETURNS TABLE (
    usuario_nome varchar,
    usuario_email varchar,
    usuario_data_nascimento date,
    diarios json,
    questionarios json,
    diagnosticos json
)
LANGUAGE sql STABLE AS $$
    SELECT
        u.nome,
        u.email,
        u.data_nascimento,
        COALESCE(
            (SELECT json_agg(json_build_object(
                        'id', d.id,
                        'data_hora', d.data_hora,
                        'texto', d.texto)
                    ORDER BY d.data_hora)
               FROM diarios d WHERE d.usuario_id = u.id),
            '[]'::json),
        COALESCE(
            (SELECT json_agg(json_build_object(
                        'questionario_id', q.id,
                        'data', q.data,
                        'pontuacao', q.pontuacao,
                        'nota_convertida', q.nota_convertida,
                        'media', q.media,
                        'texto', q.texto)
                    ORDER BY q.data)
               FROM questionarios q WHERE q.usuario_id = u.id),
            '[]'::json),
        COALESCE(
            (SELECT json_agg(json_build_object('descricao', g.descricao) ORDER BY g.id)
               FROM diagnosticos g WHERE g.usuario_id = u.id),
            '[]'::json)
    FROM usuarios u
    WHERE u.id = p_usuario_id
$$;
"""


def upgrade() -> None:
    # ── usuarios ──────────────────────────────────────────────────────────────
    op.create_table(
        "usuarios",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("nome", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("data_nascimento", sa.Date(), nullable=True),
        *_audit_columns(),
    )
    op.create_index("ix_usuarios_email", "usuarios", ["email"], unique=True)

    # ── diarios ───────────────────────────────────────────────────────────────
    op.create_table(
        "diarios",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("usuario_id", sa.String(36), nullable=False),
        sa.Column("data_hora", sa.DateTime(timezone=True), nullable=False),
        sa.Column("texto", sa.Text(), nullable=False),
        *_audit_columns(),
        _owner_fk("diarios"),
    )
    op.create_index("ix_diarios_usuario_id", "diarios", ["usuario_id"], unique=False)

    # ── questionarios ─────────────────────────────────────────────────────────
    op.create_table(
        "questionarios",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("usuario_id", sa.String(36), nullable=False),
        sa.Column("data", sa.DateTime(timezone=True), nullable=False),
        sa.Column("pontuacao", sa.Float(), nullable=False, server_default="0"),
        sa.Column("nota_convertida", sa.Float(), nullable=True),
        sa.Column("media", sa.Float(), nullable=True),
        sa.Column("texto", sa.Text(), nullable=True),
        *_audit_columns(),
        _owner_fk("questionarios"),
    )
    op.create_index("ix_questionarios_usuario_id", "questionarios", ["usuario_id"], unique=False)

    # ── diagnosticos ──────────────────────────────────────────────────────────
    op.create_table(
        "diagnosticos",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("usuario_id", sa.String(36), nullable=False),
        sa.Column("descricao", sa.Text(), nullable=False),
        *_audit_columns(),
        _owner_fk("diagnosticos"),
    )
    op.create_index("ix_diagnosticos_usuario_id", "diagnosticos", ["usuario_id"], unique=False)

    # ── aggregation function ──────────────────────────────────────────────────
    op.execute(RELATORIO_USUARIO)


def downgrade() -> None:
    op.execute("DROP FUNCTION IF EXISTS relatorio_usuario(varchar)")
    # Drop in reverse dependency order
    op.drop_table("diagnosticos")
    op.drop_table("questionarios")
    op.drop_table("diarios")
    op.drop_table("usuarios")
