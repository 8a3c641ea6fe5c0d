# quotes_admin/api/containers.py

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from quotes_admin.api.errors import http_error_from
from quotes_admin.core.database import get_db
from quotes_admin.models.container import Container
from quotes_admin.schemas.container import (
    ContainerCreate,
    ContainerLoadOut,
    ContainerOut,
    ContainerUpdate,
)
from quotes_admin.schemas.quote import QuoteOut
from quotes_admin.services.containers import get_container_load, list_container_loads
from quotes_admin.services.store import SqlQuoteStore


router = APIRouter(prefix="/containers", tags=["containers"])


def _get_container(db: Session, container_id: int) -> Container:
    container = db.query(Container).filter(Container.id == container_id).first()
    if not container:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Container não encontrado.",
        )
    return container


@router.get("/", response_model=List[ContainerOut])
def list_containers(db: Session = Depends(get_db)):
    return db.query(Container).order_by(Container.nome).all()


@router.post("/", response_model=ContainerOut, status_code=status.HTTP_201_CREATED)
def create_container(payload: ContainerCreate, db: Session = Depends(get_db)):
    container = Container(**payload.model_dump())

    db.add(container)
    db.commit()
    db.refresh(container)

    return container


@router.get("/loads", response_model=List[ContainerLoadOut])
def get_all_container_loads(db: Session = Depends(get_db)):
    """
    Ocupação (CBM, valor, capacidade restante) de todos os containers.
    """
    return list_container_loads(db)


@router.get("/{container_id}", response_model=ContainerOut)
def get_container(container_id: int, db: Session = Depends(get_db)):
    return _get_container(db, container_id)


@router.put("/{container_id}", response_model=ContainerOut)
def update_container(
    container_id: int,
    payload: ContainerUpdate,
    db: Session = Depends(get_db),
):
    container = _get_container(db, container_id)

    data = payload.model_dump(exclude_unset=True)

    for field, value in data.items():
        setattr(container, field, value)

    db.add(container)
    db.commit()
    db.refresh(container)

    return container


@router.delete("/{container_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_container(container_id: int, db: Session = Depends(get_db)):
    """
    Exclui o container. As cotações associadas não são apagadas nem alteradas.
    """
    container = _get_container(db, container_id)
    db.delete(container)
    db.commit()
    return None


@router.get("/{container_id}/quotes", response_model=List[QuoteOut])
def list_container_quotes(container_id: int, db: Session = Depends(get_db)):
    _get_container(db, container_id)
    return SqlQuoteStore(db).list_quotes_by_container(container_id)


@router.get("/{container_id}/load", response_model=ContainerLoadOut)
def get_load(container_id: int, db: Session = Depends(get_db)):
    """
    Capacidade restante pode ser negativa (overCapacity = true).
    """
    try:
        return get_container_load(db, container_id)
    except ValueError as e:
        raise http_error_from(e)
