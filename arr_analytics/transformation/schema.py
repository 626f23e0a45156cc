"""
Export Schema Mapping

Header normalization and the synonym table that maps the column names of
known billing exports onto canonical transaction fields.
"""

import re
from typing import Dict, List, Mapping

BYTE_ORDER_MARK = "\ufeff"

_PARENTHESES = re.compile(r"[()]")
_WHITESPACE = re.compile(r"\s+")

# Keys are normalized headers (see normalize_header)
HEADER_SYNONYMS: Dict[str, str] = {
    "id": "id",
    "charge id": "id",
    "invoice id": "invoice_id",
    "invoice": "invoice_id",
    "customer id": "customer_id",
    "customer": "customer_id",
    "customer_id": "customer_id",
    "customer email": "customer_email",
    "email": "customer_email",
    "amount": "amount",
    "amount captured": "amount",
    "amount_captured": "amount",
    "net": "net",
    "gross": "gross",
    "amount_cents": "amount_cents",
    "net_cents": "net_cents",
    "currency": "currency",
    "status": "status",
    "created": "created",
    "created utc": "created",
    "created_at": "created",
    "date": "created",
    "subscription id": "subscription_id",
    "subscription": "subscription_id",
    "description": "product_name",
    "product": "product_name",
    "plan name": "plan_name",
    "plan": "plan_name",
    "interval": "interval",
    "plan interval": "interval",
    "plan.interval": "interval",
    "plan.amount": "plan_amount",
    "type": "type",
}

CANONICAL_FIELDS = frozenset(HEADER_SYNONYMS.values())


def normalize_header(header: str) -> str:
    """
    Normalize a raw export header.

    Strips byte-order marks, trims, lowercases, removes parentheses and
    collapses internal whitespace, so "Created (UTC)" becomes "created utc".
    """
    h = str(header).replace(BYTE_ORDER_MARK, "").strip().lower()
    h = _PARENTHESES.sub("", h)
    return _WHITESPACE.sub(" ", h).strip()


def map_header(header: str) -> str:
    """Canonical field for a header; unknown headers pass through normalized"""
    normalized = normalize_header(header)
    return HEADER_SYNONYMS.get(normalized, normalized)


def build_header_map(headers: List[str]) -> Dict[str, str]:
    """Map each original header to its canonical field name"""
    return {header: map_header(header) for header in headers}


def remap_row(row: Mapping[str, object], header_map: Mapping[str, str]) -> Dict[str, str]:
    """
    Re-key a raw row by canonical field names with trimmed string values.

    When several headers map to the same field, the first non-empty value
    in header order wins.
    """
    out: Dict[str, str] = {}
    for header, value in row.items():
        key = header_map.get(header) or map_header(header)
        text = "" if value is None else str(value).strip()
        if key not in out or (not out[key] and text):
            out[key] = text
    return out


def unmapped_headers(headers: List[str]) -> List[str]:
    """Headers that did not match any known synonym"""
    return [h for h in headers if normalize_header(h) not in HEADER_SYNONYMS]
