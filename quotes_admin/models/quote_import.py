# quotes_admin/models/quote_import.py

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from quotes_admin.core.database import Base


class QuoteImport(Base):
    """Metadados editáveis de uma importação (o agrupamento em si é derivado das cotações)."""

    __tablename__ = "quote_imports"
    __table_args__ = (UniqueConstraint("factoryId", "updateDate", name="uq_quote_imports_factory_key"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    factory_id: Mapped[int] = mapped_column("factoryId", Integer, index=True, nullable=False)

    # chave da importação: YYYY-MM-DDTHH:MM
    update_date: Mapped[str] = mapped_column("updateDate", String(16), nullable=False)

    import_name: Mapped[Optional[str]] = mapped_column("importName", String(255), nullable=True)
    quote_name: Mapped[Optional[str]] = mapped_column("quoteName", String(255), nullable=True)
    data_pedido: Mapped[Optional[str]] = mapped_column("dataPedido", String(20), nullable=True)
    lote_pedido: Mapped[Optional[str]] = mapped_column("lotePedido", String(100), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        "createdAt", DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        "updatedAt", DateTime(timezone=True), nullable=True, onupdate=func.now()
    )
