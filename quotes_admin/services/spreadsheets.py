# quotes_admin/services/spreadsheets.py
"""
Leitura da planilha de cotação do fornecedor e exportação dos itens
selecionados para pedido, em .xlsx (openpyxl).

Planilha de entrada: primeira aba, cabeçalho na linha 3 (as duas primeiras
linhas costumam ter logo e dados da fábrica). Os nomes de coluna aceitos
estão em `QUOTE_COLUMN_ALIASES`; colunas desconhecidas são ignoradas.
"""

from __future__ import annotations

import logging
from datetime import datetime
from io import BytesIO
from typing import Any, Dict, Iterable, List, Mapping, Optional

from openpyxl import Workbook, load_workbook
from openpyxl.styles import Font

from quotes_admin.services.aggregation import (
    coerce_numeric,
    parse_created_at,
    quote_amount,
    quote_cbm_total,
    recompute_derived_fields,
)

logger = logging.getLogger(__name__)

HEADER_ROW = 3

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# campo do documento -> cabeçalhos aceitos (comparação sem caixa/espaços)
QUOTE_COLUMN_ALIASES: Dict[str, tuple] = {
    "ref": ("REF",),
    "description": ("DESCRIPTION", "Descrição"),
    "name": ("NAME", "Nome"),
    "remark": ("REMARK", "Observação"),
    "ncm": ("NCM",),
    "ctns": ("CTNS", "Caixas"),
    "unitCtn": ("UNIT/CTN", "unitCtn", "Unidade/Caixa"),
    "unitPrice": ("U.PRICE", "unitPrice", "Preço Unitário"),
    "length": ("L", "length", "Comprimento"),
    "width": ("W", "width", "Largura"),
    "height": ("H", "height", "Altura"),
    "cbm": ("CBM", "Volume"),
    "grossWeight": ("G.W", "grossWeight", "Peso Bruto"),
    "netWeight": ("N.W", "netWeight", "Peso Líquido"),
}

_TEXT_FIELDS = {"ref", "description", "name", "remark", "ncm"}

EXPORT_HEADERS = [
    "REF", "NCM", "DESCRIPTION", "NAME", "REMARK",
    "CTNS", "UNIT/CTN", "QTY", "U.PRICE", "AMOUNT",
    "L", "W", "H", "CBM", "CBM TOTAL",
    "G.W", "T.G.W", "N.W", "T.N.W",
    "FÁBRICA", "IMPORTAÇÃO", "DATA IMPORTAÇÃO", "STATUS PEDIDO", "DATA SELEÇÃO",
]


def _normalize_header(value: Any) -> str:
    return str(value).strip().casefold() if value is not None else ""


_ALIAS_LOOKUP = {
    _normalize_header(alias): field
    for field, aliases in QUOTE_COLUMN_ALIASES.items()
    for alias in aliases
}


def _is_row_empty(row: Iterable[Any]) -> bool:
    return all(c is None or (isinstance(c, str) and not c.strip()) for c in row)


def parse_quote_sheet(content: bytes, header_row: int = HEADER_ROW) -> List[Dict[str, Any]]:
    """
    Converte o .xlsx do fornecedor em documentos de cotação (sem factoryId).

    Linhas em branco são puladas; REF vazia vira `REF-<n>` (n = posição da
    linha de dados, a partir de 0). Os campos derivados (qty, amount,
    cbmTotal...) não são lidos: o motor recalcula na gravação.
    """
    try:
        wb = load_workbook(filename=BytesIO(content), data_only=True, read_only=True)
    except Exception as e:
        raise ValueError("Arquivo não é uma planilha .xlsx válida.") from e

    try:
        ws = wb.worksheets[0]
        rows = ws.iter_rows(min_row=header_row, values_only=True)
        header = next(rows, None)
        if header is None or _is_row_empty(header):
            raise ValueError(f"Cabeçalho não encontrado na linha {header_row}.")

        columns = {
            idx: _ALIAS_LOOKUP[_normalize_header(name)]
            for idx, name in enumerate(header)
            if _normalize_header(name) in _ALIAS_LOOKUP
        }
        if not columns:
            raise ValueError("Nenhuma coluna reconhecida no cabeçalho da planilha.")

        quotes: List[Dict[str, Any]] = []
        for row in rows:
            if row is None or _is_row_empty(row):
                continue
            quote: Dict[str, Any] = {}
            for idx, field in columns.items():
                value = row[idx] if idx < len(row) else None
                if field in _TEXT_FIELDS:
                    quote[field] = str(value).strip() if value is not None else ""
                else:
                    quote[field] = value
            if not quote.get("ref"):
                quote["ref"] = f"REF-{len(quotes)}"
            quotes.append(quote)
    finally:
        wb.close()

    if not quotes:
        raise ValueError("A planilha não contém cotações.")

    logger.debug("Planilha lida: %s linhas, colunas %s", len(quotes), sorted(set(columns.values())))
    return quotes


def _format_date(value: Any) -> str:
    moment = parse_created_at(value)
    return moment.strftime("%d/%m/%Y") if moment else ""


def _export_row(quote: Mapping[str, Any], factory_names: Mapping[Any, str]) -> List[Any]:
    q = recompute_derived_fields(quote)
    import_label = quote.get("importName") or quote.get("quoteName") or ""
    return [
        quote.get("ref") or "",
        quote.get("ncm") or "",
        quote.get("description") or "",
        quote.get("name") or "",
        quote.get("remark") or "",
        q["ctns"],
        q["unitCtn"],
        q["qty"],
        q["unitPrice"],
        quote_amount(quote),
        coerce_numeric(quote.get("length")),
        coerce_numeric(quote.get("width")),
        coerce_numeric(quote.get("height")),
        q["cbm"],
        quote_cbm_total(quote),
        q["grossWeight"],
        q["totalGrossWeight"],
        q["netWeight"],
        q["totalNetWeight"],
        factory_names.get(quote.get("factoryId"), ""),
        import_label,
        _format_date(quote.get("createdAt")),
        "SELECIONADO" if quote.get("selectedForOrder") else "PENDENTE",
        _format_date(quote.get("orderDate")),
    ]


def build_quotes_workbook(
    quotes: List[Mapping[str, Any]],
    factory_names: Optional[Mapping[Any, str]] = None,
    title: str = "Produtos Selecionados",
) -> bytes:
    """Gera o .xlsx (cabeçalho em negrito, uma linha por cotação) e retorna os bytes."""
    factory_names = factory_names or {}

    wb = Workbook()
    ws = wb.active
    ws.title = title

    ws.append(EXPORT_HEADERS)
    for cell in ws[1]:
        cell.font = Font(bold=True)

    for quote in quotes:
        ws.append(_export_row(quote, factory_names))

    buf = BytesIO()
    wb.save(buf)
    return buf.getvalue()


def export_filename(prefix: str = "produtos_selecionados") -> str:
    return f"{prefix}_{datetime.utcnow().strftime('%Y-%m-%d')}.xlsx"
