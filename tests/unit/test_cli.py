import logging

import pytest

from trajectory_planner.cli import sample as cli
from trajectory_planner.config import TRACE


def _rows(out: str) -> list[list[str]]:
    return [line.split(",") for line in out.strip().splitlines()]


def test_writes_csv_samples(capsys):
    code = cli.main(["0@1", "2@0.5", "--velocity", "2", "--acceleration", "5", "--rate", "100"])
    assert code == 0

    rows = _rows(capsys.readouterr().out)
    assert rows[0] == ["t", "x0", "v0", "a0"]
    assert rows[1] == ["0.000000", "0.000000", "0.000000", "5.000000"]
    last = rows[-1]
    assert float(last[1]) == pytest.approx(2.0)
    assert float(last[2]) == pytest.approx(0.0)


def test_multi_axis_header(capsys):
    assert cli.main(["0,0@1", "1,1@1", "--velocity", "2,2", "--acceleration", "5"]) == 0
    header = _rows(capsys.readouterr().out)[0]
    assert header == ["t", "x0", "x1", "v0", "v1", "a0", "a1"]


def test_infeasible_waypoints_exit_with_error(capsys):
    assert cli.main(["0@3", "1@1", "--velocity", "2"]) == 1
    assert capsys.readouterr().out == ""


def test_malformed_waypoint_is_a_usage_error():
    with pytest.raises(SystemExit):
        cli.main(["0:1", "1@1"])


@pytest.mark.parametrize(
    "argv,level",
    [
        ([], logging.WARNING),
        (["-q"], logging.ERROR),
        (["-v"], logging.INFO),
        (["-vv"], logging.DEBUG),
        (["-vvv"], TRACE),
        (["--log-level", "TRACE"], TRACE),
        (["--log-level", "ERROR"], logging.ERROR),
    ],
)
def test_log_level_selection(monkeypatch, argv, level):
    monkeypatch.setattr(cli, "TRACE_ENABLED", False)
    args = cli.build_parser().parse_args(argv + ["0@1"])
    assert cli._log_level(args) == level


def test_trace_env_switches_to_trace(monkeypatch):
    monkeypatch.setattr(cli, "TRACE_ENABLED", True)
    args = cli.build_parser().parse_args(["0@1"])
    assert cli._log_level(args) == TRACE
