# quotes_admin/schemas/quote.py

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


ShippingStatus = Literal["fabricacao", "embarcado", "em_liberacao", "nacionalizado"]
OrderStatus = Literal["selected", "pending"]


class QuoteBase(BaseModel):
    # Os nomes de campo no JSON são os mesmos do schema de documentos (camelCase)
    model_config = ConfigDict(populate_by_name=True)

    factory_id: Optional[int] = Field(default=None, alias="factoryId")
    container_id: Optional[int] = Field(default=None, alias="containerId")

    ref: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    ncm: Optional[str] = None
    remark: Optional[str] = None
    quote_name: Optional[str] = Field(default=None, alias="quoteName")
    import_name: Optional[str] = Field(default=None, alias="importName")

    ctns: Optional[float] = None
    unit_ctn: Optional[float] = Field(default=None, alias="unitCtn")
    unit_price: Optional[float] = Field(default=None, alias="unitPrice")

    length: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None
    cbm: Optional[float] = None
    gross_weight: Optional[float] = Field(default=None, alias="grossWeight")
    net_weight: Optional[float] = Field(default=None, alias="netWeight")

    selected_for_order: Optional[bool] = Field(default=None, alias="selectedForOrder")
    status: Optional[ShippingStatus] = None


class QuoteCreate(QuoteBase):
    factory_id: int = Field(alias="factoryId")


class QuoteUpdate(QuoteBase):
    pass


class QuoteBatchCreate(BaseModel):
    """Importação em lote: todas as linhas recebem o mesmo createdAt."""
    model_config = ConfigDict(populate_by_name=True)

    factory_id: int = Field(alias="factoryId")
    quote_name: Optional[str] = Field(default=None, alias="quoteName")
    import_name: Optional[str] = Field(default=None, alias="importName")
    quotes: List[QuoteBase] = Field(min_length=1)


class QuoteImportItem(QuoteBase):
    """Linha editada dentro de uma importação; sem id = linha nova."""
    id: Optional[int] = None


class ContainerAssignment(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    container_id: Optional[int] = Field(default=None, alias="containerId")


class QuoteOut(QuoteBase):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int

    qty: Optional[float] = None
    amount: Optional[float] = None
    cbm_total: Optional[float] = Field(default=None, alias="cbmTotal")
    total_gross_weight: Optional[float] = Field(default=None, alias="totalGrossWeight")
    total_net_weight: Optional[float] = Field(default=None, alias="totalNetWeight")

    selected_for_order: bool = Field(default=False, alias="selectedForOrder")
    order_status: Optional[OrderStatus] = Field(default=None, alias="orderStatus")
    order_date: Optional[datetime] = Field(default=None, alias="orderDate")

    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")


class QuoteRecomputeOut(BaseModel):
    """Resultado do recálculo sem persistência (pré-visualização no formulário)."""
    model_config = ConfigDict(populate_by_name=True)

    ctns: float
    unit_ctn: float = Field(alias="unitCtn")
    unit_price: float = Field(alias="unitPrice")
    cbm: float
    gross_weight: float = Field(alias="grossWeight")
    net_weight: float = Field(alias="netWeight")

    qty: float
    amount: float
    cbm_total: float = Field(alias="cbmTotal")
    total_gross_weight: float = Field(alias="totalGrossWeight")
    total_net_weight: float = Field(alias="totalNetWeight")
