"""
Billing Export Reader

Reads a delimited billing export (Stripe charges, invoices or subscription
exports and look-alikes) into header-keyed raw rows.

The whole export is read before parsing starts. Rows with a field count
that differs from the header are reported with their line number and then
recovered (padded or truncated) so the rest of the export still loads.
"""

import asyncio
import csv
import io
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

import structlog

logger = structlog.get_logger(__name__)

CANDIDATE_DELIMITERS = [",", ";", "\t", "|"]
BYTE_ORDER_MARK = "\ufeff"


@dataclass(frozen=True)
class ParseIssue:
    """A row the tabular parser could only partially recover"""
    row: int  # 1-based line number in the export text
    message: str


@dataclass(frozen=True)
class RawRow:
    """One data row keyed by the export's original headers"""
    row: int  # line the record starts on
    values: Dict[str, str]


@dataclass
class RawExport:
    """Parsed export prior to schema normalization"""
    headers: List[str]
    rows: List[RawRow] = field(default_factory=list)
    delimiter: str = ","
    issues: List[ParseIssue] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.rows)


def sniff_delimiter(header_line: str) -> str:
    """Pick the candidate delimiter that splits the header line the most"""
    counts = {d: header_line.count(d) for d in CANDIDATE_DELIMITERS}
    best = max(CANDIDATE_DELIMITERS, key=lambda d: counts[d])
    return best if counts[best] > 0 else ","


def _is_blank(record: List[str]) -> bool:
    return all(not value.strip() for value in record)


def read_export(text: str, delimiter: Optional[str] = None) -> RawExport:
    """
    Parse export text with a header row.

    Args:
        text: Complete export content
        delimiter: Field delimiter; sniffed from the header line when omitted

    Returns:
        RawExport with headers, rows and any recoverable parse issues

    Raises:
        ValueError: If the export has no header row
    """
    text = text.lstrip(BYTE_ORDER_MARK)
    if not text.strip():
        raise ValueError("Export is empty: no header row found")

    if delimiter is None:
        header_line = next(line for line in text.splitlines() if line.strip())
        delimiter = sniff_delimiter(header_line)

    reader = csv.reader(io.StringIO(text, newline=""), delimiter=delimiter)

    headers: Optional[List[str]] = None
    rows: List[RawRow] = []
    issues: List[ParseIssue] = []
    next_line = 1

    try:
        for record in reader:
            # first physical line of the record; quoted newlines span several
            row_number, next_line = next_line, reader.line_num + 1
            if not record or _is_blank(record):
                continue

            if headers is None:
                headers = [h.replace(BYTE_ORDER_MARK, "") for h in record]
                continue

            if len(record) != len(headers):
                issues.append(ParseIssue(
                    row=row_number,
                    message=f"Expected {len(headers)} fields, found {len(record)}",
                ))
                record = (record + [""] * len(headers))[:len(headers)]

            rows.append(RawRow(row=row_number, values=dict(zip(headers, record))))
    except csv.Error as e:
        raise ValueError(f"Export could not be parsed near line {reader.line_num}: {e}") from e

    if headers is None:
        raise ValueError("Export is empty: no header row found")

    if issues:
        logger.warning(
            "Export contains malformed rows",
            malformed_rows=len(issues),
            first_rows=[issue.row for issue in issues[:5]],
        )

    logger.info(
        "Export parsed",
        columns=len(headers),
        rows=len(rows),
        delimiter=delimiter,
    )

    return RawExport(headers=headers, rows=rows, delimiter=delimiter, issues=issues)


def decode_export(content: bytes) -> str:
    """Decode raw upload bytes, preferring UTF-8 and falling back to Latin-1"""
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError:
        logger.warning("Export is not valid UTF-8, decoding as Latin-1")
        return content.decode("latin-1")


async def load_export_text(source: Union[str, Path, bytes]) -> str:
    """
    Read the complete export content.

    Args:
        source: Path to the export file, or the raw uploaded bytes

    Returns:
        Decoded export text
    """
    if isinstance(source, bytes):
        return decode_export(source)

    path = Path(source)
    content = await asyncio.to_thread(path.read_bytes)
    logger.debug("Export file read", path=str(path), size=len(content))
    return decode_export(content)
