"""Load the survey tables into an in-memory model."""
from __future__ import annotations

import concurrent.futures
import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import requests

from hazard_survey.exposure import ExposureTable, build_exposure
from hazard_survey.relevance import RelevanceTable, Scale, build_relevance
from hazard_survey.tables import (
    ATTRIBUTES_TABLE,
    EXPOSURE_TABLE,
    HAZARDS_TABLE,
    SCORES_TABLE,
    Attribute,
    Hazard,
    Row,
    SkippedRow,
    Source,
    SurveyLoadError,
    parse_attributes,
    parse_hazards,
    read_table,
    table_source,
)

logger = logging.getLogger(__name__)

REQUIRED_TABLES = {
    'attributes': ATTRIBUTES_TABLE,
    'hazards': HAZARDS_TABLE,
    'scores': SCORES_TABLE,
}


@dataclass(frozen=True)
class SurveyModel:
    attributes: Tuple[Attribute, ...]
    hazards: Tuple[Hazard, ...]
    relevance: RelevanceTable
    exposure: ExposureTable = field(default_factory=dict)
    exposure_types: Tuple[str, ...] = ()
    skipped: Tuple[SkippedRow, ...] = ()

    @property
    def has_exposure(self) -> bool:
        return bool(self.exposure_types)


def build_model(
    attribute_rows: List[Row],
    hazard_rows: List[Row],
    score_rows: List[Row],
    exposure_rows: Optional[List[Row]] = None,
    scale: Optional[Scale] = None,
) -> SurveyModel:
    attributes, skipped_attributes = parse_attributes(attribute_rows)
    hazards, skipped_hazards = parse_hazards(hazard_rows)
    relevance, skipped_scores = build_relevance(score_rows, scale)
    exposure: ExposureTable = {}
    exposure_types: List[str] = []
    skipped_exposure: List[SkippedRow] = []
    if exposure_rows is not None:
        exposure, exposure_types, skipped_exposure = build_exposure(exposure_rows)
    skipped = skipped_attributes + skipped_hazards + skipped_scores + skipped_exposure
    for row in skipped:
        logger.debug('Skipped %s row %d: %s', row.table, row.row_number, row.reason)
    if skipped:
        counts = Counter(row.table for row in skipped)
        logger.info('Skipped rows: %s', ', '.join(f'{table}={count}' for table, count in counts.items()))
    return SurveyModel(
        attributes=tuple(attributes),
        hazards=tuple(hazards),
        relevance=relevance,
        exposure=exposure,
        exposure_types=tuple(exposure_types),
        skipped=tuple(skipped),
    )


def load_model(base: Source, scale: Optional[Scale] = None, timeout: Optional[float] = None) -> SurveyModel:
    """Fetch all tables concurrently and build the model.

    The three required tables must all load or :class:`SurveyLoadError` is
    raised. The exposure table is best-effort: any failure disables it.
    """
    with concurrent.futures.ThreadPoolExecutor(max_workers=len(REQUIRED_TABLES) + 1) as executor:
        required = {
            key: executor.submit(read_table, table_source(base, name), timeout)
            for key, name in REQUIRED_TABLES.items()
        }
        optional = executor.submit(read_table, table_source(base, EXPOSURE_TABLE), timeout)
        concurrent.futures.wait(list(required.values()) + [optional])

    rows: Dict[str, List[Row]] = {}
    for key, future in required.items():
        try:
            rows[key] = future.result()
        except (OSError, ValueError, requests.RequestException) as exc:
            raise SurveyLoadError(f"Could not load {REQUIRED_TABLES[key]}: {exc}") from exc

    exposure_rows: Optional[List[Row]] = None
    try:
        exposure_rows = optional.result()
    except (OSError, ValueError, requests.RequestException) as exc:
        logger.warning('Exposure table not loaded: %s', exc)

    return build_model(rows['attributes'], rows['hazards'], rows['scores'], exposure_rows, scale)
