# quotes_admin/api/quotes.py

import logging
from io import BytesIO
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from quotes_admin.api.errors import http_error_from
from quotes_admin.core.database import get_db
from quotes_admin.models.container import Container
from quotes_admin.models.factory import Factory
from quotes_admin.schemas.quote import (
    ContainerAssignment,
    QuoteBase,
    QuoteBatchCreate,
    QuoteCreate,
    QuoteOut,
    QuoteRecomputeOut,
    QuoteUpdate,
)
from quotes_admin.services.aggregation import recompute_derived_fields
from quotes_admin.services.commands import (
    AssignContainer,
    DeleteQuote,
    EditQuote,
    ToggleOrderSelection,
    dispatch,
)
from quotes_admin.services.imports import import_quotes
from quotes_admin.services.spreadsheets import XLSX_MEDIA_TYPE, build_quotes_workbook, export_filename
from quotes_admin.services.store import SqlQuoteStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/quotes", tags=["quotes"])


@router.get("/", response_model=List[QuoteOut])
def list_quotes(selected: Optional[bool] = None, db: Session = Depends(get_db)):
    """
    Lista as cotações. `selected=true` retorna só as marcadas para pedido.
    """
    return SqlQuoteStore(db).list_quotes(selected=selected)


@router.post("/", response_model=QuoteOut, status_code=status.HTTP_201_CREATED)
def create_quote(payload: QuoteCreate, db: Session = Depends(get_db)):
    data = recompute_derived_fields(payload.model_dump(exclude_unset=True, by_alias=True))
    return SqlQuoteStore(db).create_quote(data)


@router.post("/batch", response_model=List[QuoteOut], status_code=status.HTTP_201_CREATED)
def create_quotes_batch(payload: QuoteBatchCreate, db: Session = Depends(get_db)):
    """
    Importa várias linhas de uma planilha de uma vez.

    Todas recebem o mesmo createdAt, então formam uma única importação
    no histórico da fábrica.
    """
    rows = [item.model_dump(exclude_unset=True, by_alias=True) for item in payload.quotes]
    try:
        return import_quotes(
            SqlQuoteStore(db),
            payload.factory_id,
            rows,
            quote_name=payload.quote_name,
            import_name=payload.import_name,
        )
    except ValueError as e:
        raise http_error_from(e)


@router.post("/recompute", response_model=QuoteRecomputeOut)
def recompute_quote(payload: QuoteBase):
    """
    Recalcula qty, amount, CBM total e pesos totais sem salvar nada.
    """
    return recompute_derived_fields(payload.model_dump(by_alias=True))


@router.get("/export")
def export_selected_quotes(
    factory_id: Optional[int] = Query(default=None, alias="factoryId"),
    db: Session = Depends(get_db),
):
    """
    Planilha .xlsx com as cotações marcadas para pedido (opcionalmente de uma fábrica só).
    """
    quotes = SqlQuoteStore(db).list_quotes(selected=True)
    if factory_id is not None:
        quotes = [q for q in quotes if q["factoryId"] == factory_id]
    if not quotes:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Nenhuma cotação selecionada para exportar.",
        )

    factory_names = {f.id: f.nome_fabrica for f in db.query(Factory).all()}
    content = build_quotes_workbook(quotes, factory_names)
    logger.info("Exportação de %s cotações selecionadas", len(quotes))

    return StreamingResponse(
        BytesIO(content),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{export_filename()}"'},
    )


@router.get("/{quote_id}", response_model=QuoteOut)
def get_quote(quote_id: int, db: Session = Depends(get_db)):
    quote = SqlQuoteStore(db).get_quote(quote_id)
    if quote is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Cotação não encontrada.",
        )
    return quote


@router.put("/{quote_id}", response_model=QuoteOut)
def update_quote(quote_id: int, payload: QuoteUpdate, db: Session = Depends(get_db)):
    fields = payload.model_dump(exclude_unset=True, by_alias=True)
    try:
        return dispatch(SqlQuoteStore(db), EditQuote(quote_id=quote_id, fields=fields))
    except ValueError as e:
        raise http_error_from(e)


@router.delete("/{quote_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_quote(quote_id: int, db: Session = Depends(get_db)):
    try:
        dispatch(SqlQuoteStore(db), DeleteQuote(quote_id=quote_id))
    except ValueError as e:
        raise http_error_from(e)
    return None


@router.post("/{quote_id}/toggle-order", response_model=QuoteOut)
def toggle_order_selection(quote_id: int, db: Session = Depends(get_db)):
    """
    Marca/desmarca a cotação para o pedido (selectedForOrder, orderStatus, orderDate).
    """
    try:
        return dispatch(SqlQuoteStore(db), ToggleOrderSelection(quote_id=quote_id))
    except ValueError as e:
        raise http_error_from(e)


@router.put("/{quote_id}/container", response_model=QuoteOut)
def assign_container(quote_id: int, payload: ContainerAssignment, db: Session = Depends(get_db)):
    """
    Associa a cotação a um container (ou desassocia com containerId nulo).
    """
    if payload.container_id is not None:
        container = db.query(Container).filter(Container.id == payload.container_id).first()
        if not container:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Container não encontrado.",
            )

    try:
        return dispatch(
            SqlQuoteStore(db),
            AssignContainer(quote_id=quote_id, container_id=payload.container_id),
        )
    except ValueError as e:
        raise http_error_from(e)
