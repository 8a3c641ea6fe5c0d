from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from quotes_admin.schemas.quote import QuoteImportItem, QuoteOut


class ImportMetaUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    import_name: Optional[str] = Field(default=None, alias="importName", max_length=255)
    quote_name: Optional[str] = Field(default=None, alias="quoteName", max_length=255)
    data_pedido: Optional[str] = Field(default=None, alias="dataPedido", max_length=20)
    lote_pedido: Optional[str] = Field(default=None, alias="lotePedido", max_length=100)


class ImportMetaOut(ImportMetaUpdate):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    factory_id: int = Field(alias="factoryId")
    update_date: str = Field(alias="updateDate")


class RollupOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_amount: float = Field(alias="totalAmount")
    selected_count: int = Field(alias="selectedCount")
    total_cbm: float = Field(alias="totalCBM")


class ImportBatchOut(BaseModel):
    """Uma importação derivada: cotações do mesmo minuto de criação + metadados salvos."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    factory_id: int = Field(alias="factoryId")
    date: str
    time: str
    created_at: datetime = Field(alias="datetime")
    count: int
    total_value: float = Field(alias="totalValue")

    import_name: str = Field(default="", alias="importName")
    quote_name: str = Field(default="", alias="quoteName")
    data_pedido: str = Field(default="", alias="dataPedido")
    lote_pedido: str = Field(default="", alias="lotePedido")

    rollup: RollupOut
    quotes: List[QuoteOut]


class ImportQuotesUpdate(BaseModel):
    quotes: List[QuoteImportItem] = Field(min_length=1)


class ImportQuotesUpdateOut(BaseModel):
    updated: int
    created: int
