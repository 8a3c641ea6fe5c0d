# quotes_admin/services/containers.py

from __future__ import annotations

import logging
from typing import Dict, List

from sqlalchemy.orm import Session

from quotes_admin.models.container import Container
from quotes_admin.models.quote import Quote
from quotes_admin.services.aggregation import ContainerLoad, compute_container_load
from quotes_admin.services.store import QuoteDoc, SqlQuoteStore, quote_to_document

logger = logging.getLogger(__name__)


def _container_doc(container: Container) -> Dict:
    return {
        "id": container.id,
        "nome": container.nome,
        "capacidadeCBM": container.capacidade_cbm,
    }


def _load_to_dict(container: Container, load: ContainerLoad) -> Dict:
    if load.over_capacity:
        logger.warning(
            "Container %s (%s) acima da capacidade: %.3f m³ de %.3f m³",
            container.id,
            container.nome,
            load.total_cbm,
            load.capacidade_cbm,
        )
    return {**load.to_dict(), "nome": container.nome}


def get_container_load(db: Session, container_id: int) -> Dict:
    container = db.query(Container).filter(Container.id == container_id).first()
    if container is None:
        raise ValueError(f"Container {container_id} not found")

    quotes = SqlQuoteStore(db).list_quotes_by_container(container_id)
    return _load_to_dict(container, compute_container_load(_container_doc(container), quotes))


def list_container_loads(db: Session) -> List[Dict]:
    """Ocupação de todos os containers, com uma única consulta de cotações."""
    containers = db.query(Container).order_by(Container.nome).all()

    by_container: Dict[int, List[QuoteDoc]] = {}
    rows = db.query(Quote).filter(Quote.container_id.isnot(None)).order_by(Quote.id).all()
    for row in rows:
        by_container.setdefault(row.container_id, []).append(quote_to_document(row))

    return [
        _load_to_dict(c, compute_container_load(_container_doc(c), by_container.get(c.id, [])))
        for c in containers
    ]
