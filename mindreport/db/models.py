"""
mindreport/db/models.py — SQLAlchemy ORM models for the health-record store.

Uses SQLAlchemy 2.0 declarative style with type annotations.
Table and column names follow the store's existing (Portuguese) convention,
which is also the key convention of the JSON returned by relatorio_usuario().
The report service only reads these tables.
"""
from __future__ import annotations

import uuid
from datetime import date, datetime

from sqlalchemy import Date, DateTime, Float, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Abstract base with shared audit columns."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


# ─── Patients ─────────────────────────────────────────────────────────────────

class Usuario(Base):
    __tablename__ = "usuarios"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    nome: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    data_nascimento: Mapped[date | None] = mapped_column(Date)

    diarios: Mapped[list["Diario"]] = relationship(back_populates="usuario")
    questionarios: Mapped[list["Questionario"]] = relationship(back_populates="usuario")
    diagnosticos: Mapped[list["Diagnostico"]] = relationship(back_populates="usuario")


# ─── Health records ───────────────────────────────────────────────────────────

class Diario(Base):
    __tablename__ = "diarios"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    usuario_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("usuarios.id", ondelete="CASCADE"), nullable=False, index=True
    )
    data_hora: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    texto: Mapped[str] = mapped_column(Text, nullable=False)

    usuario: Mapped["Usuario"] = relationship(back_populates="diarios")


class Questionario(Base):
    __tablename__ = "questionarios"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    usuario_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("usuarios.id", ondelete="CASCADE"), nullable=False, index=True
    )
    data: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    pontuacao: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    nota_convertida: Mapped[float | None] = mapped_column(Float)  # 0-10 scale
    media: Mapped[float | None] = mapped_column(Float)            # holistic average, 0-10
    texto: Mapped[str | None] = mapped_column(Text)

    usuario: Mapped["Usuario"] = relationship(back_populates="questionarios")


class Diagnostico(Base):
    __tablename__ = "diagnosticos"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    usuario_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("usuarios.id", ondelete="CASCADE"), nullable=False, index=True
    )
    descricao: Mapped[str] = mapped_column(Text, nullable=False)

    usuario: Mapped["Usuario"] = relationship(back_populates="diagnosticos")
