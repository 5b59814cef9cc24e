import json

import pytest

from hazard_survey import build_priority_report, export, tables
from hazard_survey.scoring import ScoredHazard
from hazard_survey.session import SurveyState, build_results

from test_loader import _write_tables


def _results():
    return [
        ScoredHazard('FLD', 'FLD', 'River "flash" flooding', 26, 100, 'High', 14.0, 100.0),
        ScoredHazard('FIR', 'FIR', 'Wildfire', 10, 38, 'Medium', None, None),
        ScoredHazard('CYB', 'CYB', 'Cyber, attack', 0, 0, 'Low', 3.5, 25.0),
    ]


def test_export_csv_escapes_names_and_adds_exposure_column():
    text = export.export_csv(_results(), 'Lands')

    lines = text.split('\r\n')
    assert lines[0] == 'Rank,Hazard Code,Hazard Name,Score,Band,Exposure (Lands)'
    assert lines[1] == '1,FLD,"River ""flash"" flooding",100,High,14'
    assert lines[2] == '2,FIR,Wildfire,38,Medium,'
    assert lines[3] == '3,CYB,"Cyber, attack",0,Low,3.5'


def test_export_csv_without_exposure_axis():
    results = [ScoredHazard('H1', 'H1', 'Storm', 0, 0, 'Low')]

    text = export.export_csv(results, 'Lands')

    assert text.splitlines()[0] == 'Rank,Hazard Code,Hazard Name,Score,Band'


def test_export_ignores_top_filter(model):
    state = SurveyState(show_top=1)
    results = build_results(model, state)

    text = export.export_csv(results, state.active_exposure(model.exposure_types))
    payload = export.build_payload(model, state, results)

    assert len(text.strip().split('\r\n')) == len(model.hazards) + 1
    assert len(payload['hazards']) == 1


def test_payload_carries_breakdown_and_quadrant(model):
    state = SurveyState(answers={'A1': 5}, profile_key='people')
    results = build_results(model, state)

    payload = export.build_payload(model, state, results)

    assert payload['profile']['label'] == 'People focus'
    assert payload['exposureType'] == 'All assets'
    assert payload['hasExposure'] is True
    top = payload['hazards'][0]
    assert top['code'] == 'FLD'
    assert top['quadrant'] == 'High planning / High exposure'
    assert [row['contribution'] for row in top['breakdown']] == [25, 9]
    json.dumps(payload)


def test_cli_writes_csv_and_payload(tmp_path, capsys):
    data_dir = tmp_path / 'public'
    data_dir.mkdir()
    _write_tables(data_dir)
    answers = tmp_path / 'answers.json'
    answers.write_text(json.dumps({'A1': 5, 'A4': 1}), encoding='utf-8')
    out_dir = tmp_path / 'out'

    status = build_priority_report.main(
        ['--data', str(data_dir), '--answers', str(answers), '--output-dir', str(out_dir), '--explain', 'FLD']
    )

    assert status == 0
    csv_text = (out_dir / export.CSV_FILENAME).read_bytes().decode('utf-8')
    assert csv_text.startswith('Rank,Hazard Code,Hazard Name,Score,Band,Exposure (All assets)\r\n')
    assert '1,FLD,Flooding,100,High,7\r\n' in csv_text
    payload_text = (out_dir / export.PAYLOAD_FILENAME).read_text(encoding='utf-8')
    assert payload_text.startswith('window.HAZARD_PRIORITIES = ')
    output = capsys.readouterr().out
    assert '✔️  Wrote' in output
    assert 'Breakdown for FLD:' in output


def test_cli_reports_fatal_load_error(tmp_path, capsys):
    status = build_priority_report.main(['--data', str(tmp_path), '--output-dir', str(tmp_path / 'out')])

    assert status == 1
    assert tables.ATTRIBUTES_TABLE in capsys.readouterr().err
    assert not (tmp_path / 'out').exists()


def test_cli_rejects_out_of_range_answers(tmp_path, capsys):
    _write_tables(tmp_path)
    answers = tmp_path / 'answers.json'
    answers.write_text(json.dumps({'A1': 9}), encoding='utf-8')

    status = build_priority_report.main(['--data', str(tmp_path), '--answers', str(answers), '--output-dir', str(tmp_path / 'out')])

    assert status == 1
    assert 'Invalid answers' in capsys.readouterr().err


def test_export_csv_keeps_full_exposure_precision():
    results = [ScoredHazard('H1', 'H1', 'Flood', 10, 100, 'High', 1234.5678, 100.0)]

    text = export.export_csv(results, 'Lands')

    assert text.split('\r\n')[1] == '1,H1,Flood,100,High,1234.5678'


def test_cli_rejects_non_positive_top(tmp_path, capsys):
    _write_tables(tmp_path)

    with pytest.raises(SystemExit) as excinfo:
        build_priority_report.main(['--data', str(tmp_path), '--top', '-3', '--output-dir', str(tmp_path / 'out')])

    assert excinfo.value.code == 2
    assert '--top' in capsys.readouterr().err
    assert not (tmp_path / 'out').exists()
