# quotes_admin/services/aggregation.py
"""
Motor de agregação das cotações.

Funções puras que calculam os totais derivados (quantidade, CBM, valor)
a partir de documentos de cotação, agrupando por importação (minuto de
criação) ou por container.

As cotações chegam como documentos (dicts) com os nomes de campo do
schema persistido: `ctns`, `unitCtn`, `unitPrice`, `amount`, `cbm`,
`cbmTotal`, `grossWeight`, `netWeight`, `containerId`, `selectedForOrder`,
`createdAt`. Nenhuma função aqui altera a entrada nem levanta exceção por
campo ausente ou corrompido: valores ausentes viram o default documentado
(0, ou 1 para `unitCtn`, que também nunca fica zerado nem negativo).

Limitação conhecida: a "importação" é só o minuto de criação truncado.
Duas importações feitas no mesmo minuto para a mesma fábrica caem no mesmo
grupo; isso não é detectado aqui.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Collection, Dict, Iterable, List, Mapping, Optional

QuoteDoc = Mapping[str, Any]

# YYYY-MM-DDTHH:MM (mesmos 16 caracteres de um ISO-8601 em UTC)
IMPORT_KEY_FORMAT = "%Y-%m-%dT%H:%M"


def _optional_numeric(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None

    try:
        if isinstance(value, (int, float, Decimal)):
            number = float(value)
        elif isinstance(value, str):
            text = value.strip().replace(" ", "")
            if not text:
                return None
            if "," in text:
                if "." in text and text.rfind(",") < text.rfind("."):
                    # 1,234.56
                    text = text.replace(",", "")
                else:
                    # 1.234,56 ou 2,5
                    text = text.replace(".", "").replace(",", ".")
            number = float(text)
        else:
            # objetos aninhados, listas etc.
            return None
    except (ValueError, OverflowError):
        return None

    if not math.isfinite(number):
        return None
    return number


def coerce_numeric(value: Any, default: float = 0.0) -> float:
    """
    Converte um campo numérico vindo do banco/planilha em float.

    - int, float e Decimal finitos viram float;
    - strings numéricas são aceitas, inclusive com vírgula decimal ("2,5");
    - None, bool, NaN/infinito, dict/list e strings inválidas retornam `default`.
    """
    number = _optional_numeric(value)
    return float(default) if number is None else number


def parse_created_at(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            return None
    return None


def import_batch_key(created_at: Any) -> Optional[str]:
    """
    Chave da importação: instante de criação truncado no minuto, em UTC.

    Datas sem timezone são tratadas como UTC. Valor ausente ou ilegível
    retorna None (a cotação fica fora de qualquer importação).
    """
    moment = parse_created_at(created_at)
    if moment is None:
        return None
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.strftime(IMPORT_KEY_FORMAT)


def _unit_ctn(quote: QuoteDoc) -> float:
    # unitCtn ausente, ilegível ou <= 0 vale 1: senão qty zera
    value = _optional_numeric(quote.get("unitCtn"))
    if value is None or value <= 0:
        return 1.0
    return value


def quote_amount(quote: QuoteDoc) -> float:
    """`amount` salvo se for positivo; senão recalcula ctns * unitCtn * unitPrice."""
    stored = coerce_numeric(quote.get("amount"))
    if stored > 0:
        return stored
    return coerce_numeric(quote.get("ctns")) * _unit_ctn(quote) * coerce_numeric(quote.get("unitPrice"))


def quote_cbm_total(quote: QuoteDoc) -> float:
    """`cbmTotal` salvo se existir; senão cbm * ctns."""
    stored = _optional_numeric(quote.get("cbmTotal"))
    if stored is not None:
        return stored
    return coerce_numeric(quote.get("cbm")) * coerce_numeric(quote.get("ctns"))


@dataclass(frozen=True)
class Rollup:
    total_amount: float = 0.0
    selected_count: int = 0
    total_cbm: float = 0.0

    def __add__(self, other: "Rollup") -> "Rollup":
        if not isinstance(other, Rollup):
            return NotImplemented
        return Rollup(
            total_amount=self.total_amount + other.total_amount,
            selected_count=self.selected_count + other.selected_count,
            total_cbm=self.total_cbm + other.total_cbm,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalAmount": self.total_amount,
            "selectedCount": self.selected_count,
            "totalCBM": self.total_cbm,
        }


@dataclass(frozen=True)
class ContainerLoad:
    container_id: Any
    capacidade_cbm: float
    total_cbm: float
    remaining_capacity: float
    total_value: float
    quote_count: int

    @property
    def over_capacity(self) -> bool:
        # capacidade negativa é um estado válido (overbooking), só sinalizado
        return self.remaining_capacity < 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "containerId": self.container_id,
            "capacidadeCBM": self.capacidade_cbm,
            "totalCBM": self.total_cbm,
            "remainingCapacity": self.remaining_capacity,
            "totalValue": self.total_value,
            "quoteCount": self.quote_count,
            "overCapacity": self.over_capacity,
        }


def group_by_import_batch(quotes: Iterable[QuoteDoc]) -> Dict[str, List[QuoteDoc]]:
    """
    Agrupa as cotações de uma fábrica por chave de importação.

    Cotações sem `createdAt` são descartadas silenciosamente. Cada cotação
    com data cai em exatamente um grupo; as chaves saem em ordem crescente
    e, dentro do grupo, a ordem de entrada é mantida.
    """
    groups: Dict[str, List[QuoteDoc]] = {}
    for quote in quotes:
        key = import_batch_key(quote.get("createdAt"))
        if key is None:
            continue
        groups.setdefault(key, []).append(quote)
    return {key: groups[key] for key in sorted(groups)}


def selected_quote_ids(quotes: Iterable[QuoteDoc]) -> set:
    return {q.get("id") for q in quotes if q.get("selectedForOrder") is True}


def compute_import_rollup(quotes: Iterable[QuoteDoc], selected_ids: Collection[Any]) -> Rollup:
    """Totais das cotações da importação que estão marcadas para pedido."""
    total_amount = 0.0
    total_cbm = 0.0
    selected_count = 0

    for quote in quotes:
        if quote.get("id") not in selected_ids:
            continue
        selected_count += 1
        total_amount += quote_amount(quote)
        total_cbm += quote_cbm_total(quote)

    return Rollup(total_amount=total_amount, selected_count=selected_count, total_cbm=total_cbm)


def compute_container_load(container: QuoteDoc, quotes: Iterable[QuoteDoc]) -> ContainerLoad:
    """
    Ocupação de um container a partir de todas as cotações associadas a ele.

    `remaining_capacity` não é limitado a zero: container com mais CBM do
    que a capacidade retorna valor negativo e `over_capacity` verdadeiro.
    """
    capacity = coerce_numeric(container.get("capacidadeCBM"))
    total_cbm = 0.0
    total_value = 0.0
    count = 0

    for quote in quotes:
        count += 1
        total_cbm += quote_cbm_total(quote)
        total_value += quote_amount(quote)

    return ContainerLoad(
        container_id=container.get("id"),
        capacidade_cbm=capacity,
        total_cbm=total_cbm,
        remaining_capacity=capacity - total_cbm,
        total_value=total_value,
        quote_count=count,
    )


def recompute_derived_fields(quote: QuoteDoc) -> Dict[str, Any]:
    """
    Retorna uma cópia da cotação com os campos derivados recalculados.

    qty = ctns * unitCtn, amount = qty * unitPrice, cbmTotal = cbm * ctns,
    totalGrossWeight / totalNetWeight = peso por caixa * ctns. Os campos base
    também são normalizados para float, então aplicar duas vezes dá o mesmo
    resultado.
    """
    result = dict(quote)

    ctns = coerce_numeric(quote.get("ctns"))
    unit_ctn = _unit_ctn(quote)
    unit_price = coerce_numeric(quote.get("unitPrice"))
    cbm = coerce_numeric(quote.get("cbm"))
    gross_weight = coerce_numeric(quote.get("grossWeight"))
    net_weight = coerce_numeric(quote.get("netWeight"))

    qty = ctns * unit_ctn

    result.update(
        ctns=ctns,
        unitCtn=unit_ctn,
        unitPrice=unit_price,
        cbm=cbm,
        grossWeight=gross_weight,
        netWeight=net_weight,
        qty=qty,
        amount=qty * unit_price,
        cbmTotal=cbm * ctns,
        totalGrossWeight=gross_weight * ctns,
        totalNetWeight=net_weight * ctns,
    )
    return result
