"""Read the survey CSV tables and validate their rows."""
from __future__ import annotations

import io
import logging
import math
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Union

import pandas as pd
import requests

logger = logging.getLogger(__name__)

FETCH_TIMEOUT = float(os.environ.get('GF_SURVEY_FETCH_TIMEOUT', 30))

ATTRIBUTES_TABLE = 'attributes.csv'
HAZARDS_TABLE = 'hazards.csv'
SCORES_TABLE = 'hazard_attribute_scores_long.csv'
EXPOSURE_TABLE = 'exposure.csv'

Source = Union[str, Path]
Row = Dict[str, object]


class SurveyLoadError(RuntimeError):
    """A required table could not be fetched or parsed."""


@dataclass(frozen=True)
class SkippedRow:
    table: str
    row_number: int
    reason: str


@dataclass(frozen=True)
class Attribute:
    id: str
    category: str
    text: str


@dataclass(frozen=True)
class Hazard:
    id: str
    code: str
    name: str


def is_url(source: Source) -> bool:
    return isinstance(source, str) and source.startswith(('http://', 'https://'))


def table_source(base: Source, name: str) -> Source:
    if is_url(base):
        return f"{str(base).rstrip('/')}/{name}"
    return Path(base) / name


def _read_text(source: Source, timeout: float) -> str:
    if is_url(source):
        response = requests.get(str(source), timeout=timeout)
        response.raise_for_status()
        return response.content.decode('utf-8-sig')
    path = Path(source)
    if not path.exists():
        raise FileNotFoundError(f"Missing source file: {path}")
    return path.read_text(encoding='utf-8-sig')


def read_table(source: Source, timeout: Optional[float] = None) -> List[Row]:
    """Return the rows of a header-having CSV as dicts of raw strings.

    Cells are read without NA coercion so markers like ``N/A`` reach the
    models untouched; blank lines are dropped by pandas.
    """
    text = _read_text(source, FETCH_TIMEOUT if timeout is None else timeout)
    if not text.strip():
        return []
    df = pd.read_csv(io.StringIO(text), dtype=str, keep_default_na=False, skipinitialspace=True)
    df.columns = [str(col).strip() for col in df.columns]
    logger.debug('Read %d rows from %s', len(df), source)
    return df.to_dict(orient='records')


def clean_cell(value: object) -> str:
    if value is None:
        return ''
    if isinstance(value, float) and math.isnan(value):
        return ''
    return str(value).strip()


def _first_present(row: Mapping[str, object], keys: Iterable[str]) -> str:
    for key in keys:
        value = clean_cell(row.get(key))
        if value:
            return value
    return ''


def parse_attributes(rows: Iterable[Mapping[str, object]]) -> Tuple[List[Attribute], List[SkippedRow]]:
    attributes: List[Attribute] = []
    skipped: List[SkippedRow] = []
    for row_number, row in enumerate(rows, start=1):
        text = clean_cell(row.get('attribute_text'))
        if not text:
            skipped.append(SkippedRow('attributes', row_number, 'missing attribute_text'))
            continue
        attributes.append(
            Attribute(
                id=_first_present(row, ('id', 'attribute_id')) or f'ATTR_{row_number}',
                category=clean_cell(row.get('category')) or 'Other',
                text=text,
            )
        )
    return attributes, skipped


def parse_hazards(rows: Iterable[Mapping[str, object]]) -> Tuple[List[Hazard], List[SkippedRow]]:
    hazards: List[Hazard] = []
    skipped: List[SkippedRow] = []
    for row_number, row in enumerate(rows, start=1):
        code = clean_cell(row.get('Hazard Code'))
        if not code:
            skipped.append(SkippedRow('hazards', row_number, 'missing Hazard Code'))
            continue
        hazards.append(Hazard(id=code, code=code, name=clean_cell(row.get('Hazard Descriptions'))))
    return hazards, skipped
