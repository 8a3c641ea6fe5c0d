# quotes_admin/api/factories.py

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from sqlalchemy.orm import Session

from quotes_admin.api.errors import http_error_from
from quotes_admin.core.database import get_db
from quotes_admin.models.factory import Factory
from quotes_admin.schemas.factory import FactoryCreate, FactoryOut, FactoryUpdate
from quotes_admin.schemas.quote import QuoteOut
from quotes_admin.schemas.quote_import import (
    ImportBatchOut,
    ImportMetaOut,
    ImportMetaUpdate,
    ImportQuotesUpdate,
    ImportQuotesUpdateOut,
)
from quotes_admin.services.imports import (
    get_import,
    import_quotes,
    list_imports,
    update_import_metadata,
    update_import_quotes,
)
from quotes_admin.services.spreadsheets import parse_quote_sheet
from quotes_admin.services.store import SqlQuoteStore


router = APIRouter(prefix="/factories", tags=["factories"])


def _get_factory(db: Session, factory_id: int) -> Factory:
    factory = db.query(Factory).filter(Factory.id == factory_id).first()
    if not factory:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Fábrica não encontrada.",
        )
    return factory


@router.get("/", response_model=List[FactoryOut])
def list_factories(db: Session = Depends(get_db)):
    """
    Lista todas as fábricas cadastradas.
    """
    return db.query(Factory).order_by(Factory.nome_fabrica).all()


@router.post("/", response_model=FactoryOut, status_code=status.HTTP_201_CREATED)
def create_factory(payload: FactoryCreate, db: Session = Depends(get_db)):
    existing = (
        db.query(Factory)
        .filter(Factory.nome_fabrica == payload.nome_fabrica)
        .first()
    )
    if existing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Já existe uma fábrica com esse nome.",
        )

    factory = Factory(**payload.model_dump())

    db.add(factory)
    db.commit()
    db.refresh(factory)

    return factory


@router.get("/{factory_id}", response_model=FactoryOut)
def get_factory(factory_id: int, db: Session = Depends(get_db)):
    return _get_factory(db, factory_id)


@router.put("/{factory_id}", response_model=FactoryOut)
def update_factory(
    factory_id: int,
    payload: FactoryUpdate,
    db: Session = Depends(get_db),
):
    factory = _get_factory(db, factory_id)

    data = payload.model_dump(exclude_unset=True)

    for field, value in data.items():
        setattr(factory, field, value)

    db.add(factory)
    db.commit()
    db.refresh(factory)

    return factory


@router.delete("/{factory_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_factory(factory_id: int, db: Session = Depends(get_db)):
    """
    Exclui só o cadastro da fábrica; as cotações ficam (use DELETE /factories/{id}/quotes).
    """
    factory = _get_factory(db, factory_id)
    db.delete(factory)
    db.commit()
    return None


# -----------------------------------------------------------------
# Cotações e importações da fábrica
# -----------------------------------------------------------------

@router.get("/{factory_id}/quotes", response_model=List[QuoteOut])
def list_factory_quotes(factory_id: int, db: Session = Depends(get_db)):
    _get_factory(db, factory_id)
    return SqlQuoteStore(db).list_quotes_by_factory(factory_id)


@router.delete("/{factory_id}/quotes")
def delete_factory_quotes(factory_id: int, db: Session = Depends(get_db)):
    _get_factory(db, factory_id)
    deleted = SqlQuoteStore(db).delete_quotes_by_factory(factory_id)
    return {"deleted": deleted}


@router.get("/{factory_id}/imports", response_model=List[ImportBatchOut])
def list_factory_imports(factory_id: int, db: Session = Depends(get_db)):
    """
    Histórico de importações: cotações agrupadas pelo minuto de criação,
    com metadados salvos e totais dos itens marcados para pedido.
    """
    _get_factory(db, factory_id)
    return list_imports(SqlQuoteStore(db), factory_id)


@router.post(
    "/{factory_id}/imports/upload",
    response_model=List[QuoteOut],
    status_code=status.HTTP_201_CREATED,
)
def upload_factory_import(
    factory_id: int,
    file: UploadFile = File(...),
    quote_name: Optional[str] = Form(default=None, alias="quoteName"),
    import_name: Optional[str] = Form(default=None, alias="importName"),
    db: Session = Depends(get_db),
):
    """
    Importa a planilha .xlsx do fornecedor (primeira aba, cabeçalho na linha 3)
    como uma nova importação da fábrica.
    """
    _get_factory(db, factory_id)
    try:
        rows = parse_quote_sheet(file.file.read())
        return import_quotes(
            SqlQuoteStore(db),
            factory_id,
            rows,
            quote_name=quote_name,
            import_name=import_name or file.filename,
        )
    except ValueError as e:
        raise http_error_from(e)


@router.get("/{factory_id}/imports/{import_key}", response_model=ImportBatchOut)
def get_factory_import(factory_id: int, import_key: str, db: Session = Depends(get_db)):
    _get_factory(db, factory_id)
    try:
        return get_import(SqlQuoteStore(db), factory_id, import_key)
    except ValueError as e:
        raise http_error_from(e)


@router.put("/{factory_id}/imports/{import_key}", response_model=ImportMetaOut)
def update_factory_import(
    factory_id: int,
    import_key: str,
    payload: ImportMetaUpdate,
    db: Session = Depends(get_db),
):
    """
    Salva nome da importação, nome da cotação, data e lote do pedido.
    """
    _get_factory(db, factory_id)
    try:
        return update_import_metadata(
            SqlQuoteStore(db),
            factory_id,
            import_key,
            payload.model_dump(exclude_unset=True, by_alias=True),
        )
    except ValueError as e:
        raise http_error_from(e)


@router.put("/{factory_id}/imports/{import_key}/quotes", response_model=ImportQuotesUpdateOut)
def update_factory_import_quotes(
    factory_id: int,
    import_key: str,
    payload: ImportQuotesUpdate,
    db: Session = Depends(get_db),
):
    _get_factory(db, factory_id)
    items = [q.model_dump(exclude_unset=True, by_alias=True) for q in payload.quotes]
    try:
        updated, created = update_import_quotes(SqlQuoteStore(db), factory_id, import_key, items)
    except ValueError as e:
        raise http_error_from(e)
    return ImportQuotesUpdateOut(updated=updated, created=created)
