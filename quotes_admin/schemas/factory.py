# quotes_admin/schemas/factory.py

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


FactoryStatus = Literal["ativa", "inativa", "manutencao"]


class FactoryBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    nome_fabrica: str = Field(alias="nomeFabrica", min_length=1, max_length=255)
    localizacao: Optional[str] = None
    segmento: Optional[str] = None

    contato_principal: Optional[str] = Field(default=None, alias="contatoPrincipal")
    email_contato: Optional[str] = Field(default=None, alias="emailContato", max_length=255)
    telefone_contato: Optional[str] = Field(default=None, alias="telefoneContato")
    observacoes: Optional[str] = None

    status: FactoryStatus = "ativa"


class FactoryCreate(FactoryBase):
    pass


class FactoryUpdate(FactoryBase):
    nome_fabrica: Optional[str] = Field(default=None, alias="nomeFabrica", min_length=1, max_length=255)
    status: Optional[FactoryStatus] = None

    @field_validator("nome_fabrica", "status")
    @classmethod
    def _not_null(cls, v):
        # campo pode ser omitido, mas não apagado
        if v is None:
            raise ValueError("não pode ser nulo")
        return v


class FactoryOut(FactoryBase):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")
