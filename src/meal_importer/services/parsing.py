"""CSV parsing with delimiter detection."""

import csv
import io
import logging
from dataclasses import dataclass, field
from enum import StrEnum

from meal_importer.domain.imports import ParseFailure, RawRow

DELIMITERS: tuple[str, ...] = (",", ";")
MAX_DELIMITER_RETRIES = 1

# Header of the food catalog export, which is not a meal plan.
_CATALOG_COLUMNS = frozenset({"name", "category", "kcal"})

FOOD_NAME_COLUMN = "foodName"

_logger = logging.getLogger(__name__)


class AttemptStatus(StrEnum):
    """Outcome of parsing with one delimiter."""

    OK = "ok"
    RETRY = "retry"
    FAIL = "fail"


@dataclass(frozen=True)
class ParseAttempt:
    """Tagged result of a single parsing attempt."""

    status: AttemptStatus
    delimiter: str
    rows: list[RawRow] = field(default_factory=list)
    reason: str = ""


def parse_rows(data: bytes, encoding: str = "utf-8") -> list[RawRow]:
    """Parse CSV bytes into rows keyed by header, detecting the delimiter."""
    text = _decode(data, encoding)
    reasons: list[str] = []
    for delimiter in DELIMITERS[: MAX_DELIMITER_RETRIES + 1]:
        attempt = parse_with_delimiter(text, delimiter)
        if attempt.status is AttemptStatus.OK:
            _ensure_meal_plan_header(attempt.rows)
            return attempt.rows
        if attempt.status is AttemptStatus.FAIL:
            raise ParseFailure(attempt.reason)
        _logger.info(
            "CSV parse with delimiter %r needs retry: %s", delimiter, attempt.reason
        )
        reasons.append(f"delimiter {delimiter!r}: {attempt.reason}")
    raise ParseFailure("could not detect the delimiter (" + "; ".join(reasons) + ")")


def parse_food_list(data: bytes, encoding: str = "utf-8") -> list[str]:
    """Parse a single-column food list into trimmed food names."""
    rows = parse_rows(data, encoding)
    names = [(row.get(FOOD_NAME_COLUMN) or "").strip() for row in rows]
    foods = [name for name in names if name]
    if not foods:
        raise ParseFailure(
            f"no food names found; check that the column is named '{FOOD_NAME_COLUMN}'"
        )
    return foods


def parse_with_delimiter(text: str, delimiter: str) -> ParseAttempt:
    """Parse text with one delimiter and classify the result."""
    reader = csv.reader(io.StringIO(text), delimiter=delimiter, strict=False)
    try:
        records = [record for record in reader if any(cell.strip() for cell in record)]
    except csv.Error as exc:
        return ParseAttempt(
            AttemptStatus.FAIL, delimiter, reason=f"malformed CSV: {exc}"
        )

    if not records:
        return ParseAttempt(AttemptStatus.FAIL, delimiter, reason="file is empty")

    header = [name.strip() for name in records[0]]
    if len(header) == 1 and _mentions_other_delimiter(header[0], delimiter):
        return ParseAttempt(
            AttemptStatus.RETRY,
            delimiter,
            reason="header has a single column",
        )

    rows: list[RawRow] = []
    for line_index, record in enumerate(records[1:]):
        if len(record) > len(header):
            return ParseAttempt(
                AttemptStatus.RETRY,
                delimiter,
                reason=(
                    f"row {line_index + 2} has {len(record)} fields, "
                    f"expected {len(header)}"
                ),
            )
        padded = record + [""] * (len(header) - len(record))
        rows.append(dict(zip(header, padded, strict=True)))

    if not rows:
        return ParseAttempt(
            AttemptStatus.FAIL, delimiter, reason="file contains no data rows"
        )
    return ParseAttempt(AttemptStatus.OK, delimiter, rows=rows)


def _decode(data: bytes, encoding: str) -> str:
    if encoding.lower().replace("_", "-") in {"utf-8", "utf8"}:
        encoding = "utf-8-sig"
    try:
        return data.decode(encoding)
    except (UnicodeDecodeError, LookupError) as exc:
        raise ParseFailure(f"file is not valid {encoding} text") from exc


def _mentions_other_delimiter(value: str, delimiter: str) -> bool:
    return any(other in value for other in DELIMITERS if other != delimiter)


def _ensure_meal_plan_header(rows: list[RawRow]) -> None:
    if _CATALOG_COLUMNS.issubset(rows[0].keys()):
        raise ParseFailure("wrong file type")
