#!/usr/bin/env python3
"""Rank hazards by planning priority from survey answers and write the results."""
from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Dict, List, Optional

from hazard_survey.export import build_payload, write_csv, write_payload
from hazard_survey.loader import SurveyModel, load_model
from hazard_survey.profiles import ALL_PROFILE, PROFILES
from hazard_survey.relevance import DEFAULT_SCALE, SCALES
from hazard_survey.scoring import explain
from hazard_survey.session import SurveyState, build_results
from hazard_survey.tables import SurveyLoadError

DATA_SOURCE = os.environ.get('GF_SURVEY_DATA', str(Path.cwd() / 'public'))
OUTPUT_DIR = Path(os.environ.get('GF_SURVEY_OUTPUT', Path.cwd() / 'survey_results'))


def _display(path: Path) -> Path:
    try:
        return path.relative_to(Path.cwd())
    except ValueError:
        return path


def load_answers(path: Optional[Path]) -> Dict[str, int]:
    if path is None:
        return {}
    payload = json.loads(path.read_text(encoding='utf-8'))
    if not isinstance(payload, dict):
        raise ValueError(f"Answers file must hold a JSON object, got {type(payload).__name__}")
    return payload


def build_state(model: SurveyModel, answers: Dict[str, int], profile: str, exposure: Optional[str], top: Optional[int]) -> SurveyState:
    state = SurveyState(profile_key=profile, exposure_type=exposure, show_top=top)
    for attribute_id, value in answers.items():
        state = state.set_answer(attribute_id, value)
    unknown = set(answers) - {attribute.id for attribute in model.attributes}
    if unknown:
        print(f"⚠️  Answers for unknown attributes ignored in scoring: {', '.join(sorted(unknown))}")
    return state


def _print_explain(model: SurveyModel, state: SurveyState, hazard_id: str) -> None:
    rows = explain(hazard_id, model.relevance, model.attributes, state.answers)
    if not rows:
        print(f"No scoring available for hazard '{hazard_id}'.")
        return
    print(f"Breakdown for {hazard_id}:")
    for row in rows:
        print(f"  {row.contribution:>3}  {row.user_importance} × {row.priority} ({row.letter})  {row.attribute} [{row.category}]")


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description='Rank hazards by planning priority from survey answers.')
    parser.add_argument('--data', default=DATA_SOURCE, help='Directory or base URL holding the survey CSVs')
    parser.add_argument('--answers', type=Path, help='JSON file mapping attribute id to importance (1-5)')
    parser.add_argument('--profile', default=ALL_PROFILE, help=f"Weighting profile ({', '.join(PROFILES)})")
    parser.add_argument('--exposure', help='Exposure metric to plot against planning score')
    parser.add_argument('--scale', default=DEFAULT_SCALE, choices=sorted(SCALES), help='Relevance letter scale')
    parser.add_argument('--top', type=int, help='Limit the chart payload to the top N hazards')
    parser.add_argument('--output-dir', type=Path, default=OUTPUT_DIR)
    parser.add_argument('--explain', metavar='HAZARD', help='Print the contribution breakdown for one hazard')
    parser.add_argument('-v', '--verbose', action='store_true', help='Log skipped rows')
    args = parser.parse_args(argv)
    if args.top is not None and args.top < 1:
        parser.error('--top must be a positive number of hazards')

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING, format='%(levelname)s %(name)s: %(message)s')

    try:
        model = load_model(args.data, scale=args.scale)
    except SurveyLoadError as exc:
        print(f"Could not load one or more CSV files: {exc}", file=sys.stderr)
        return 1
    if args.profile not in PROFILES:
        print(f"⚠️  Unknown profile '{args.profile}', using '{ALL_PROFILE}'")
    if args.exposure and args.exposure not in model.exposure_types:
        print(f"⚠️  Exposure metric '{args.exposure}' not available. Available: {', '.join(model.exposure_types) or 'none'}")
    if model.skipped:
        print(f"⚠️  Skipped {len(model.skipped)} incomplete rows")

    try:
        state = build_state(model, load_answers(args.answers), args.profile, args.exposure, args.top)
    except (OSError, ValueError) as exc:
        print(f"Invalid answers: {exc}", file=sys.stderr)
        return 1

    results = build_results(model, state)
    exposure_type = state.active_exposure(model.exposure_types)
    csv_path = write_csv(results, exposure_type, args.output_dir)
    print(f"✔️  Wrote {_display(csv_path)}")
    payload_path = write_payload(build_payload(model, state, results), args.output_dir)
    print(f"✔️  Wrote {_display(payload_path)}")

    if args.explain:
        _print_explain(model, state, args.explain)
    return 0


if __name__ == '__main__':
    sys.exit(main())
