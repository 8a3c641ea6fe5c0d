# quotes_admin/services/commands.py

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, Mapping, Optional

from quotes_admin.services.aggregation import recompute_derived_fields
from quotes_admin.services.store import QuoteDoc, QuoteStore

logger = logging.getLogger(__name__)


# Intenções emitidas pela camada de API; quem aplica é `dispatch`.

@dataclass(frozen=True)
class EditQuote:
    quote_id: int
    fields: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DeleteQuote:
    quote_id: int


@dataclass(frozen=True)
class ToggleOrderSelection:
    quote_id: int


@dataclass(frozen=True)
class AssignContainer:
    quote_id: int
    container_id: Optional[int] = None  # None desassocia


def _require(store: QuoteStore, quote_id: int) -> QuoteDoc:
    quote = store.get_quote(quote_id)
    if quote is None:
        raise ValueError(f"Quote {quote_id} not found")
    return quote


def _edit_quote(store: QuoteStore, cmd: EditQuote) -> Optional[QuoteDoc]:
    current = _require(store, cmd.quote_id)
    merged = recompute_derived_fields({**current, **cmd.fields})
    store.update_quote(cmd.quote_id, merged)
    return store.get_quote(cmd.quote_id)


def _delete_quote(store: QuoteStore, cmd: DeleteQuote) -> None:
    store.delete_quote(cmd.quote_id)
    logger.info("Cotação %s excluída", cmd.quote_id)
    return None


def _toggle_order_selection(store: QuoteStore, cmd: ToggleOrderSelection) -> Optional[QuoteDoc]:
    current = _require(store, cmd.quote_id)
    selected = not bool(current.get("selectedForOrder"))
    store.update_quote(
        cmd.quote_id,
        {
            "selectedForOrder": selected,
            "orderStatus": "selected" if selected else "pending",
            "orderDate": datetime.utcnow() if selected else None,
        },
    )
    logger.info("Cotação %s %s do pedido", cmd.quote_id, "adicionada ao" if selected else "removida")
    return store.get_quote(cmd.quote_id)


def _assign_container(store: QuoteStore, cmd: AssignContainer) -> Optional[QuoteDoc]:
    _require(store, cmd.quote_id)
    store.update_quote(cmd.quote_id, {"containerId": cmd.container_id})
    if cmd.container_id is None:
        logger.info("Cotação %s desassociada de container", cmd.quote_id)
    else:
        logger.info("Cotação %s associada ao container %s", cmd.quote_id, cmd.container_id)
    return store.get_quote(cmd.quote_id)


_HANDLERS: Dict[type, Callable[[QuoteStore, Any], Optional[QuoteDoc]]] = {
    EditQuote: _edit_quote,
    DeleteQuote: _delete_quote,
    ToggleOrderSelection: _toggle_order_selection,
    AssignContainer: _assign_container,
}


def dispatch(store: QuoteStore, command: Any) -> Optional[QuoteDoc]:
    """Aplica o comando no store e retorna o documento atualizado (None em exclusão)."""
    handler = _HANDLERS.get(type(command))
    if handler is None:
        raise TypeError(f"Comando desconhecido: {type(command).__name__}")
    return handler(store, command)
