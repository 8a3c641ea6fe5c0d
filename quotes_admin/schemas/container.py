# quotes_admin/schemas/container.py

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from quotes_admin.schemas.quote import ShippingStatus


class ContainerBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    nome: str = Field(min_length=1, max_length=255)
    numero: Optional[str] = None
    ref_container: Optional[str] = Field(default=None, alias="refContainer")
    capacidade_cbm: float = Field(alias="capacidadeCBM", gt=0)
    status: ShippingStatus = "fabricacao"


class ContainerCreate(ContainerBase):
    pass


class ContainerUpdate(ContainerBase):
    nome: Optional[str] = Field(default=None, min_length=1, max_length=255)
    capacidade_cbm: Optional[float] = Field(default=None, alias="capacidadeCBM", gt=0)
    status: Optional[ShippingStatus] = None

    @field_validator("nome", "capacidade_cbm", "status")
    @classmethod
    def _not_null(cls, v):
        if v is None:
            raise ValueError("não pode ser nulo")
        return v


class ContainerOut(ContainerBase):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    # containers antigos podem ter capacidade 0
    capacidade_cbm: float = Field(alias="capacidadeCBM")
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")


class ContainerLoadOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    container_id: int = Field(alias="containerId")
    nome: Optional[str] = None
    capacidade_cbm: float = Field(alias="capacidadeCBM")

    total_cbm: float = Field(alias="totalCBM")
    remaining_capacity: float = Field(alias="remainingCapacity")  # pode ser negativo
    total_value: float = Field(alias="totalValue")
    quote_count: int = Field(alias="quoteCount")
    over_capacity: bool = Field(alias="overCapacity")
