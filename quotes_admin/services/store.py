# quotes_admin/services/store.py
"""
Colaborador de persistência das cotações.

O motor de agregação trabalha com documentos (dicts com os nomes de campo
do schema: `ctns`, `unitCtn`, `containerId`...). Este módulo define o
contrato (`QuoteStore`) e a implementação em cima do SQLAlchemy, que
converte linhas do banco nesses documentos e vice-versa.

Sem transações entre operações nem controle de versão: a última escrita
vence.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Protocol

from sqlalchemy import inspect
from sqlalchemy.orm import Session

from quotes_admin.models.quote import Quote
from quotes_admin.models.quote_import import QuoteImport
from quotes_admin.schemas.quote import QuoteOut
from quotes_admin.schemas.quote_import import ImportMetaOut

logger = logging.getLogger(__name__)

QuoteDoc = Dict[str, Any]

IMPORT_META_FIELDS = ("importName", "quoteName", "dataPedido", "lotePedido")


class QuoteStore(Protocol):
    def get_quote(self, quote_id: int) -> Optional[QuoteDoc]: ...

    def list_quotes_by_factory(self, factory_id: int) -> List[QuoteDoc]: ...

    def list_quotes_by_container(self, container_id: int) -> List[QuoteDoc]: ...

    def create_quote(self, fields: Mapping[str, Any], created_at: Optional[datetime] = None) -> QuoteDoc: ...

    def create_quotes(self, rows: List[Mapping[str, Any]], created_at: datetime) -> List[QuoteDoc]: ...

    def update_quote(self, quote_id: int, fields: Mapping[str, Any]) -> None: ...

    def delete_quote(self, quote_id: int) -> None: ...

    def list_import_metadata(self, factory_id: int) -> List[Dict[str, Any]]: ...

    def upsert_import_metadata(self, factory_id: int, import_key: str, fields: Mapping[str, Any]) -> Dict[str, Any]: ...


def _column_map(model) -> Dict[str, str]:
    """Nome da coluna (schema de documento) -> atributo Python."""
    return {attr.columns[0].name: attr.key for attr in inspect(model).column_attrs}


_QUOTE_COLUMNS = _column_map(Quote)
_QUOTE_IMPORT_COLUMNS = _column_map(QuoteImport)

# campos que o cliente não escreve diretamente
_QUOTE_PROTECTED = {"id", "createdAt", "updatedAt", "created_at", "updated_at"}


def quote_to_document(quote: Quote) -> QuoteDoc:
    return QuoteOut.model_validate(quote).model_dump(by_alias=True)


def _apply_fields(obj: Any, columns: Dict[str, str], fields: Mapping[str, Any], protected: set) -> None:
    attrs = set(columns.values())
    for key, value in fields.items():
        if key in protected:
            continue
        attr = columns.get(key) or (key if key in attrs else None)
        if attr is None or attr in protected:
            logger.debug("Campo ignorado em %s: %s", type(obj).__name__, key)
            continue
        setattr(obj, attr, value)


class SqlQuoteStore:
    def __init__(self, db: Session) -> None:
        self.db = db

    # -------------------------------------------------------------
    # Cotações
    # -------------------------------------------------------------

    def _get(self, quote_id: int) -> Quote:
        quote = self.db.query(Quote).filter(Quote.id == quote_id).first()
        if quote is None:
            raise ValueError(f"Quote {quote_id} not found")
        return quote

    def get_quote(self, quote_id: int) -> Optional[QuoteDoc]:
        quote = self.db.query(Quote).filter(Quote.id == quote_id).first()
        return quote_to_document(quote) if quote else None

    def list_quotes(self, selected: Optional[bool] = None) -> List[QuoteDoc]:
        q = self.db.query(Quote)
        if selected is not None:
            q = q.filter(Quote.selected_for_order.is_(selected))
        return [quote_to_document(r) for r in q.order_by(Quote.id).all()]

    def list_quotes_by_factory(self, factory_id: int) -> List[QuoteDoc]:
        rows = self.db.query(Quote).filter(Quote.factory_id == factory_id).order_by(Quote.id).all()
        return [quote_to_document(r) for r in rows]

    def list_quotes_by_container(self, container_id: int) -> List[QuoteDoc]:
        rows = self.db.query(Quote).filter(Quote.container_id == container_id).order_by(Quote.id).all()
        return [quote_to_document(r) for r in rows]

    def create_quote(self, fields: Mapping[str, Any], created_at: Optional[datetime] = None) -> QuoteDoc:
        quote = Quote()
        _apply_fields(quote, _QUOTE_COLUMNS, fields, _QUOTE_PROTECTED)
        if quote.selected_for_order is None:
            quote.selected_for_order = False
        if created_at is not None:
            quote.created_at = created_at
            quote.updated_at = created_at

        self.db.add(quote)
        self.db.commit()
        self.db.refresh(quote)
        return quote_to_document(quote)

    def create_quotes(self, rows: List[Mapping[str, Any]], created_at: datetime) -> List[QuoteDoc]:
        """Várias cotações num único commit, todas com o mesmo createdAt."""
        quotes = []
        for fields in rows:
            quote = Quote()
            _apply_fields(quote, _QUOTE_COLUMNS, fields, _QUOTE_PROTECTED)
            if quote.selected_for_order is None:
                quote.selected_for_order = False
            quote.created_at = created_at
            quote.updated_at = created_at
            self.db.add(quote)
            quotes.append(quote)

        self.db.commit()
        for quote in quotes:
            self.db.refresh(quote)
        return [quote_to_document(q) for q in quotes]

    def update_quote(self, quote_id: int, fields: Mapping[str, Any]) -> None:
        quote = self._get(quote_id)
        _apply_fields(quote, _QUOTE_COLUMNS, fields, _QUOTE_PROTECTED)
        self.db.add(quote)
        self.db.commit()

    def delete_quote(self, quote_id: int) -> None:
        quote = self._get(quote_id)
        self.db.delete(quote)
        self.db.commit()

    def delete_quotes_by_factory(self, factory_id: int) -> int:
        deleted = (
            self.db.query(Quote)
            .filter(Quote.factory_id == factory_id)
            .delete(synchronize_session=False)
        )
        self.db.commit()
        return deleted

    # -------------------------------------------------------------
    # Metadados de importação (nome, data e lote do pedido)
    # -------------------------------------------------------------

    def list_import_metadata(self, factory_id: int) -> List[Dict[str, Any]]:
        rows = self.db.query(QuoteImport).filter(QuoteImport.factory_id == factory_id).all()
        return [ImportMetaOut.model_validate(r).model_dump(by_alias=True) for r in rows]

    def upsert_import_metadata(self, factory_id: int, import_key: str, fields: Mapping[str, Any]) -> Dict[str, Any]:
        meta = (
            self.db.query(QuoteImport)
            .filter(QuoteImport.factory_id == factory_id, QuoteImport.update_date == import_key)
            .first()
        )
        data = {k: v for k, v in fields.items() if k in IMPORT_META_FIELDS}

        if meta is None:
            meta = QuoteImport(factory_id=factory_id, update_date=import_key)
            self.db.add(meta)
        _apply_fields(meta, _QUOTE_IMPORT_COLUMNS, data, {"id", "factory_id", "update_date"})

        self.db.commit()
        self.db.refresh(meta)
        return ImportMetaOut.model_validate(meta).model_dump(by_alias=True)
