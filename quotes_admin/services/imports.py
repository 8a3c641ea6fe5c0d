# quotes_admin/services/imports.py

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Tuple

from quotes_admin.services.aggregation import (
    IMPORT_KEY_FORMAT,
    compute_import_rollup,
    group_by_import_batch,
    import_batch_key,
    parse_created_at,
    quote_amount,
    recompute_derived_fields,
    selected_quote_ids,
)
from quotes_admin.services.store import QuoteStore

logger = logging.getLogger(__name__)


def parse_import_key(import_key: str) -> datetime:
    """Converte a chave YYYY-MM-DDTHH:MM no início do minuto (naive, UTC)."""
    try:
        return datetime.strptime(import_key, IMPORT_KEY_FORMAT)
    except (TypeError, ValueError):
        raise ValueError(f"Chave de importação inválida: {import_key!r} (esperado YYYY-MM-DDTHH:MM)")


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def list_imports(store: QuoteStore, factory_id: int) -> List[Dict[str, Any]]:
    """
    Histórico de importações de uma fábrica, mais recente primeiro.

    Cada importação traz as cotações do mesmo minuto de criação, os
    metadados salvos (nome, data e lote do pedido) e os totais das
    cotações marcadas para pedido.
    """
    quotes = store.list_quotes_by_factory(factory_id)
    saved = {m["updateDate"]: m for m in store.list_import_metadata(factory_id)}
    selected = selected_quote_ids(quotes)

    imports: List[Dict[str, Any]] = []
    for key, members in group_by_import_batch(quotes).items():
        moment = _as_utc(parse_created_at(members[0].get("createdAt")))
        meta = saved.get(key, {})

        quote_name = meta.get("quoteName") or ""
        if not quote_name:
            # sem nome salvo: usa o da primeira cotação que tiver
            quote_name = next((q["quoteName"] for q in members if q.get("quoteName")), "")

        imports.append(
            {
                "id": key,
                "factoryId": factory_id,
                "date": moment.strftime("%d/%m/%Y"),
                "time": moment.strftime("%H:%M"),
                "datetime": moment,
                "count": len(members),
                "totalValue": sum(quote_amount(q) for q in members),
                "importName": meta.get("importName") or "",
                "quoteName": quote_name,
                "dataPedido": meta.get("dataPedido") or "",
                "lotePedido": meta.get("lotePedido") or "",
                "rollup": compute_import_rollup(members, selected).to_dict(),
                "quotes": members,
            }
        )

    imports.sort(key=lambda i: i["id"], reverse=True)
    return imports


def get_import(store: QuoteStore, factory_id: int, import_key: str) -> Dict[str, Any]:
    parse_import_key(import_key)
    for item in list_imports(store, factory_id):
        if item["id"] == import_key:
            return item
    raise ValueError(f"Import {import_key} not found")


def update_import_metadata(
    store: QuoteStore,
    factory_id: int,
    import_key: str,
    fields: Mapping[str, Any],
) -> Dict[str, Any]:
    parse_import_key(import_key)
    meta = store.upsert_import_metadata(factory_id, import_key, fields)
    logger.info("Metadados da importação %s (fábrica %s) salvos: %s", import_key, factory_id, dict(fields))
    return meta


def update_import_quotes(
    store: QuoteStore,
    factory_id: int,
    import_key: str,
    items: List[Mapping[str, Any]],
) -> Tuple[int, int]:
    """
    Salva a edição em massa das cotações de uma importação.

    Linhas sem id, ou com id que não existe mais, são criadas com o
    createdAt no minuto da importação, para continuarem no mesmo grupo.
    Id de cotação de outra fábrica ou de outra importação levanta
    ValueError antes de qualquer gravação.
    Retorna (atualizadas, criadas).
    """
    created_at = parse_import_key(import_key)

    # valida tudo antes de gravar: nenhuma linha de outra fábrica ou importação
    plan = []
    for item in items:
        fields = dict(item)
        quote_id: Optional[int] = fields.pop("id", None)
        current = store.get_quote(quote_id) if quote_id is not None else None
        if current is not None and (
            current.get("factoryId") != factory_id
            or import_batch_key(current.get("createdAt")) != import_key
        ):
            raise ValueError(
                f"Cotação {quote_id} não pertence à importação {import_key} da fábrica {factory_id}"
            )
        fields["factoryId"] = factory_id
        plan.append((quote_id, current, fields))

    updated = created = 0
    for quote_id, current, fields in plan:
        if current is None:
            if quote_id is not None:
                logger.warning("Cotação %s não encontrada na importação %s; criando nova", quote_id, import_key)
            store.create_quote(recompute_derived_fields(fields), created_at=created_at)
            created += 1
            continue

        store.update_quote(quote_id, recompute_derived_fields({**current, **fields}))
        updated += 1

    logger.info(
        "Importação %s (fábrica %s): %s cotações atualizadas, %s criadas",
        import_key,
        factory_id,
        updated,
        created,
    )
    return updated, created


def import_quotes(
    store: QuoteStore,
    factory_id: int,
    rows: List[Mapping[str, Any]],
    quote_name: Optional[str] = None,
    import_name: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """
    Grava uma importação nova: todas as linhas com o mesmo createdAt, para
    formarem um único grupo no histórico da fábrica.

    quoteName/importName do lote só preenchem as linhas que não têm o seu.
    """
    if not rows:
        raise ValueError("Nenhuma cotação para importar.")

    prepared = []
    for row in rows:
        data = dict(row)
        data.pop("id", None)
        data["factoryId"] = factory_id
        if quote_name and not data.get("quoteName"):
            data["quoteName"] = quote_name
        if import_name and not data.get("importName"):
            data["importName"] = import_name
        prepared.append(recompute_derived_fields(data))

    created = store.create_quotes(prepared, created_at=datetime.utcnow())
    logger.info("Importação de %s cotações para a fábrica %s", len(created), factory_id)
    return created
