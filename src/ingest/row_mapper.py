"""Declarative row-to-record mapping.

This module turns a header plus string cells into typed records. Each
record shape is described once as an ordered table of field specs, and a
generic decoder reuses that table for every row.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Callable, Generic, Iterable, Sequence, TypeVar

from core.errors import MortalityIngestError
from core.types import CensusEntry, ObservationRecord

RecordT = TypeVar("RecordT")

_BOM_ARTIFACTS = ("\ufeff", "\u00ef\u00bb\u00bf")
_WEEK_DATE_FORMATS = ("%Y-%m-%d", "%m/%d/%Y")


@dataclass(frozen=True)
class FieldSpec:
    """Mapping from one logical field to one source column.

    Attributes:
        name: Keyword argument name passed to the record factory.
        column: Normalized source column name.
        parser: Converts the raw cell text into the field value.
        required: Whether a missing column is an ingest failure.
        default: Field value used when an optional column is absent.
    """

    name: str
    column: str
    parser: Callable[[str], Any]
    required: bool = True
    default: Any = None


def normalize_header(header: Iterable[str]) -> tuple[str, ...]:
    """Strip byte-order-mark artifacts and whitespace from column names."""
    normalized: list[str] = []
    for column in header:
        name = str(column)
        for artifact in _BOM_ARTIFACTS:
            if name.startswith(artifact):
                name = name[len(artifact):]
        normalized.append(name.strip())
    return tuple(normalized)


def parse_text(raw_value: str) -> str:
    """Return cell text without surrounding whitespace."""
    return raw_value.strip()


def parse_count(raw_value: str) -> int:
    """Parse a count cell where an empty string means zero.

    Thousands separators are accepted.

    Raises:
        ValueError: If the non-empty cell is not an integer.
    """
    text = raw_value.strip().replace(",", "")
    if not text:
        return 0
    return int(text)


def parse_required_int(raw_value: str) -> int:
    """Parse a mandatory integer cell.

    Raises:
        ValueError: If the cell is empty or not an integer.
    """
    text = raw_value.strip().replace(",", "")
    return int(text)


def parse_week_date(raw_value: str) -> date:
    """Parse ``YYYY-MM-DD`` or ``MM/DD/YYYY`` dates.

    Raises:
        ValueError: If no supported format matches.
    """
    text = raw_value.strip()
    for date_format in _WEEK_DATE_FORMATS:
        try:
            return datetime.strptime(text, date_format).date()
        except ValueError:
            continue
    raise ValueError(f"unsupported date '{raw_value}'")


class RowMapper(Generic[RecordT]):
    """Decoder for one header layout and one record shape."""

    def __init__(
        self,
        field_specs: Sequence[FieldSpec],
        header: Sequence[str],
        factory: Callable[..., RecordT],
    ) -> None:
        self._factory = factory
        self._bindings = _bind_columns(field_specs, normalize_header(header))

    def map_row(self, cells: Sequence[str], row_number: int) -> RecordT:
        """Decode one row of cells into a record.

        Args:
            cells: Raw cell strings aligned with the header.
            row_number: One-based data row number for error context.

        Returns:
            Record built by the factory.

        Raises:
            MortalityIngestError: If a cell is missing or cannot be parsed.
        """
        values: dict[str, Any] = {}
        for spec, index in self._bindings:
            if index is None:
                values[spec.name] = spec.default
                continue
            if index >= len(cells):
                raise MortalityIngestError(
                    f"Row {row_number} has {len(cells)} cells but column "
                    f"'{spec.column}' is at position {index + 1}. Check the source file layout."
                )
            values[spec.name] = _parse_cell(spec, cells[index], row_number)
        return self._factory(**values)


def decode_rows(
    field_specs: Sequence[FieldSpec],
    header: Sequence[str],
    rows: Iterable[Sequence[str]],
    factory: Callable[..., RecordT],
) -> list[RecordT]:
    """Decode all rows of a table with one field-spec table.

    Args:
        field_specs: Ordered logical field declarations.
        header: Raw header row.
        rows: Raw data rows.
        factory: Record constructor accepting the field names as keywords.

    Returns:
        One record per row, in row order.

    Raises:
        MortalityIngestError: If a required column is missing or a row is malformed.
    """
    mapper = RowMapper(field_specs, header, factory)
    return [mapper.map_row(cells, row_number) for row_number, cells in enumerate(rows, 1)]


def _bind_columns(
    field_specs: Sequence[FieldSpec],
    header: tuple[str, ...],
) -> tuple[tuple[FieldSpec, int | None], ...]:
    """Resolve each field spec to its column position."""
    positions = {column: index for index, column in reversed(list(enumerate(header)))}
    bindings: list[tuple[FieldSpec, int | None]] = []
    for spec in field_specs:
        index = positions.get(spec.column)
        if index is None and spec.required:
            raise MortalityIngestError(
                f"Required column '{spec.column}' not found in header {list(header)}. "
                "The upstream file layout may have changed."
            )
        bindings.append((spec, index))
    return tuple(bindings)


def _parse_cell(spec: FieldSpec, raw_value: str, row_number: int) -> Any:
    try:
        return spec.parser(raw_value)
    except ValueError as error:
        raise MortalityIngestError(
            f"Failed to parse column '{spec.column}' in row {row_number}: "
            f"value {raw_value!r} is invalid ({error}). Fix the source row and retry."
        ) from error


OBSERVATION_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("region", "State", parse_text),
    FieldSpec("kind", "Type", parse_text),
    FieldSpec("count", "Observed Number", parse_count),
    FieldSpec("week_ending_date", "Week Ending Date", parse_week_date),
    FieldSpec("average_expected_count", "Average Expected Count", parse_count, False, 0),
    FieldSpec("excess_estimate", "Excess Estimate", parse_count, False, 0),
    FieldSpec("outcome", "Outcome", parse_text, False, ""),
)

CENSUS_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("region", "Region", parse_text),
    FieldSpec("population", "Population", parse_required_int),
)


def decode_observations(
    header: Sequence[str], rows: Iterable[Sequence[str]]
) -> list[ObservationRecord]:
    """Decode mortality export rows into observation records."""
    return decode_rows(OBSERVATION_FIELDS, header, rows, ObservationRecord)


def decode_census(header: Sequence[str], rows: Iterable[Sequence[str]]) -> list[CensusEntry]:
    """Decode census rows into census entries."""
    return decode_rows(CENSUS_FIELDS, header, rows, CensusEntry)
