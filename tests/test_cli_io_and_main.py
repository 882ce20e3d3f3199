from __future__ import annotations

import csv
import json
import runpy
import subprocess
import sys
from pathlib import Path
from types import SimpleNamespace

import pytest

from schedulelab.io import SAMPLE_PROJECT


def _write_json(path: Path, obj: object) -> None:
    path.write_text(json.dumps(obj), encoding="utf-8")


def _two_task_graph() -> dict:
    return {
        "tasks": [
            {"id": "A", "name": "Design", "dependencies": [], "optimistic": 2, "mostLikely": 3, "pessimistic": 5},
            {"id": "B", "name": "Build", "dependencies": ["A"], "optimistic": 1, "mostLikely": 2, "pessimistic": 4},
        ]
    }


def test_cli_simulate_writes_summary_completions_and_histogram(tmp_path: Path) -> None:
    from schedulelab.cli import main

    graph_path = tmp_path / "g.json"
    _write_json(graph_path, _two_task_graph())

    out_summary = tmp_path / "out" / "summary.json"
    out_completions = tmp_path / "out" / "completions.csv"
    out_histogram = tmp_path / "out" / "histogram.csv"

    rc = main(
        [
            "simulate",
            "--graph",
            str(graph_path),
            "--iterations",
            "200",
            "--seed",
            "123",
            "--target",
            "6",
            "--out-summary",
            str(out_summary),
            "--out-completions",
            str(out_completions),
            "--out-histogram",
            str(out_histogram),
        ]
    )
    assert rc == 0

    summary = json.loads(out_summary.read_text(encoding="utf-8"))
    assert summary["iterations"] == 200
    assert summary["seed"] == 123
    assert 0.0 <= summary["target"]["probability"] <= 100.0

    with out_completions.open(encoding="utf-8", newline="") as f:
        rows = list(csv.reader(f))
    assert rows[0] == ["trial", "completion"]
    assert len(rows) == 201
    values = [float(r[1]) for r in rows[1:]]
    assert values == sorted(values)

    assert "cumulative_probability" in out_histogram.read_text(encoding="utf-8")


def test_cli_simulate_applies_a_scenario(tmp_path: Path) -> None:
    from schedulelab.cli import main

    graph_path = tmp_path / "g.json"
    _write_json(graph_path, _two_task_graph())
    out_summary = tmp_path / "summary.json"

    rc = main(
        [
            "simulate",
            "--graph",
            str(graph_path),
            "--iterations",
            "100",
            "--seed",
            "1",
            "--scenario",
            "parallel",
            "--scenario-tasks",
            "B",
            "--out-summary",
            str(out_summary),
        ]
    )
    assert rc == 0
    summary = json.loads(out_summary.read_text(encoding="utf-8"))
    assert summary["scenario"] == "Parallel Tasks Scenario"
    # A and B now run side by side: completion never exceeds max(5, 4).
    assert summary["completion"]["max"] <= 5.0


def test_cli_reports_validation_errors_with_exit_code_2(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    from schedulelab.cli import main

    graph = _two_task_graph()
    graph["tasks"][0]["dependencies"] = ["B"]
    graph_path = tmp_path / "g.json"
    _write_json(graph_path, graph)

    rc = main(["validate", "--graph", str(graph_path)])
    assert rc == 2
    assert "cycle" in capsys.readouterr().err

    rc = main(
        [
            "simulate",
            "--graph",
            str(tmp_path / "g.json"),
            "--iterations",
            "10",
            "--out-summary",
            str(tmp_path / "s.json"),
        ]
    )
    assert rc == 2


def test_cli_rejects_too_few_iterations(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    from schedulelab.cli import main

    graph_path = tmp_path / "g.json"
    _write_json(graph_path, _two_task_graph())
    out_summary = tmp_path / "s.json"

    rc = main(
        [
            "simulate",
            "--graph",
            str(graph_path),
            "--iterations",
            "10",
            "--out-summary",
            str(out_summary),
        ]
    )
    assert rc == 2
    assert "iterations must be >= 100" in capsys.readouterr().err
    assert not out_summary.exists()


def test_cli_reports_missing_and_malformed_graph_files(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    from schedulelab.cli import main

    rc = main(["validate", "--graph", str(tmp_path / "missing.json")])
    assert rc == 2
    assert capsys.readouterr().err.startswith("error:")

    graph_path = tmp_path / "g.json"
    _write_json(graph_path, {"tasks": "nope"})
    rc = main(["validate", "--graph", str(graph_path)])
    assert rc == 2
    assert "must be a list" in capsys.readouterr().err


def test_cli_validate_prints_order(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    from schedulelab.cli import main

    graph_path = tmp_path / "g.json"
    _write_json(graph_path, _two_task_graph())
    assert main(["validate", "--graph", str(graph_path)]) == 0
    assert capsys.readouterr().out.strip() == "A > B"


def test_cli_example_writes_a_valid_graph(tmp_path: Path) -> None:
    from schedulelab.cli import main
    from schedulelab.io import load_graph

    out = tmp_path / "ex" / "project.json"
    assert main(["example", "--out", str(out)]) == 0
    graph = load_graph(out)
    assert len(graph) == len(SAMPLE_PROJECT)
    assert graph.topological_order()[-1] == "8"


def test_shipped_example_matches_the_sample_project(repo_root: Path) -> None:
    from schedulelab.io import load_graph
    from schedulelab.model import TaskGraph

    shipped = load_graph(repo_root / "examples" / "software_project.json")
    assert shipped == TaskGraph.from_json(SAMPLE_PROJECT)


def test_cli_unhandled_command_raises_assertion(monkeypatch: pytest.MonkeyPatch) -> None:
    import schedulelab.cli

    class _DummyParser:
        def parse_args(self, _argv: list[str] | None) -> object:
            return SimpleNamespace(cmd="nope")

    monkeypatch.setattr(schedulelab.cli, "_build_parser", lambda: _DummyParser())
    with pytest.raises(AssertionError, match="Unhandled command"):
        schedulelab.cli.main(["anything"])


def test_python_m_schedulelab_executes_main(tmp_path: Path, repo_root: Path) -> None:
    graph_path = tmp_path / "g.json"
    _write_json(graph_path, _two_task_graph())
    out_summary = tmp_path / "summary.json"

    proc = subprocess.run(
        [
            sys.executable,
            "-m",
            "schedulelab",
            "simulate",
            "--graph",
            str(graph_path),
            "--iterations",
            "100",
            "--seed",
            "1",
            "--out-summary",
            str(out_summary),
        ],
        capture_output=True,
        text=True,
        check=False,
        cwd=repo_root,
    )
    assert proc.returncode == 0, proc.stderr
    assert out_summary.exists()


def test___main___module_runs_inprocess_and_exits_zero(tmp_path: Path) -> None:
    graph_path = tmp_path / "g.json"
    _write_json(graph_path, _two_task_graph())
    out_summary = tmp_path / "summary.json"

    old_argv = sys.argv[:]
    try:
        sys.argv = [
            "python -m schedulelab",
            "simulate",
            "--graph",
            str(graph_path),
            "--iterations",
            "100",
            "--seed",
            "1",
            "--out-summary",
            str(out_summary),
        ]
        with pytest.raises(SystemExit) as exc:
            runpy.run_module("schedulelab.__main__", run_name="__main__")
        assert exc.value.code == 0
    finally:
        sys.argv = old_argv

    assert out_summary.exists()


def test_io_writers(tmp_path: Path) -> None:
    from schedulelab.io import load_graph, write_completions_csv, write_graph_json
    from schedulelab.model import TaskGraph

    out_csv = tmp_path / "nested" / "c.csv"
    write_completions_csv(out_csv, [1.5, 2.5])
    assert out_csv.read_text(encoding="utf-8").splitlines() == [
        "trial,completion",
        "1,1.5",
        "2,2.5",
    ]

    graph = TaskGraph.from_json(_two_task_graph())
    out_graph = tmp_path / "nested" / "g.json"
    write_graph_json(out_graph, graph)
    assert load_graph(out_graph) == graph
