"""Test class BatchEvaluator."""
from multiprocessing import Pipe, Process
from pathlib import Path

from pydantic import ValidationError
import pytest

from keypad_calculator.batch.runner import WORKER_CRASHED, ActiveWorker, BatchEvaluator


def _exit_immediately() -> None:
    """Target for a process that finishes without doing anything."""


@pytest.fixture
def tmp_output_file(tmp_path: Path) -> Path:
    """Create a temporary output file path."""
    return tmp_path / "results.txt"


@pytest.fixture
def input_file(tmp_path: Path) -> Path:
    path = tmp_path / "ops.txt"
    path.write_text("2+3*4\n\n2^3^2\n(1+2\n5*-3\n1/0\n")
    return path


def test_rejects_missing_input(tmp_path: Path, tmp_output_file: Path) -> None:
    with pytest.raises(ValidationError):
        BatchEvaluator(input_file=tmp_path / "missing.txt", output_file=tmp_output_file)


def test_rejects_zero_workers(input_file: Path, tmp_output_file: Path) -> None:
    with pytest.raises(ValidationError):
        BatchEvaluator(input_file=input_file, output_file=tmp_output_file, max_workers=0)


def test_spawn_worker_returns_process_and_pipe(input_file: Path, tmp_output_file: Path) -> None:
    """_spawn_worker returns a running Process and the receiving end of its Pipe."""
    evaluator = BatchEvaluator(input_file=input_file, output_file=tmp_output_file)
    worker = evaluator._spawn_worker("1 + 1", 1)

    payload = worker.conn.recv()
    worker.process.join()

    assert worker.line_number == 1
    assert payload["result"] == 2.0


def test_collect_finished_workers_writes_results(input_file: Path, tmp_output_file: Path) -> None:
    """_collect_finished_workers writes results or errors to file."""
    evaluator = BatchEvaluator(input_file=input_file, output_file=tmp_output_file)

    parent_conn, child_conn = Pipe(duplex=False)
    # simulate worker payload
    child_conn.send({"line": 1, "expression": "2 + 3", "result": 5.0, "error": None, "error_kind": None})
    child_conn.close()

    proc = Process(target=_exit_immediately)
    proc.start()
    proc.join()

    active_workers = [ActiveWorker(proc, parent_conn, 1, "2 + 3")]
    results = []

    with tmp_output_file.open("w") as f_out:
        evaluator._collect_finished_workers(active_workers, f_out, results)

    assert active_workers == []
    assert results[0].result == 5.0
    assert "2 + 3 = 5" in tmp_output_file.read_text()


def test_collect_worker_without_payload(input_file: Path, tmp_output_file: Path) -> None:
    """A worker that exits without sending anything produces an error record."""
    evaluator = BatchEvaluator(input_file=input_file, output_file=tmp_output_file)

    parent_conn, child_conn = Pipe(duplex=False)
    child_conn.close()

    proc = Process(target=_exit_immediately)
    proc.start()
    proc.join()

    results = []
    with tmp_output_file.open("w") as f_out:
        evaluator._collect_finished_workers([ActiveWorker(proc, parent_conn, 3, "1+1")], f_out, results)

    assert results[0].error_kind == WORKER_CRASHED
    assert "1+1 -> ERROR" in tmp_output_file.read_text()


@pytest.mark.parametrize("max_workers", [1, 2, None])
def test_run_evaluates_every_line(input_file: Path, tmp_output_file: Path, max_workers) -> None:
    """Run writes one line per expression and returns the results in input order."""
    evaluator = BatchEvaluator(input_file=input_file, output_file=tmp_output_file, max_workers=max_workers)
    results = evaluator.run()

    assert [r.line for r in results] == [1, 2, 3, 4, 5]
    assert [r.display for r in results] == ["14", "512", "Error", "-15", "Error"]
    assert results[2].error_kind == "mismatched_parenthesis"
    assert results[4].error_kind == "division_by_zero"

    content = tmp_output_file.read_text().splitlines()
    assert len(content) == 5
    for expected in ["2+3*4 = 14", "2^3^2 = 512", "(1+2 -> ERROR", "5*-3 = -15", "1/0 -> ERROR"]:
        assert any(expected in line for line in content)


def test_run_empty_input(tmp_path: Path, tmp_output_file: Path) -> None:
    empty = tmp_path / "empty.txt"
    empty.write_text("\n\n")

    assert BatchEvaluator(input_file=empty, output_file=tmp_output_file).run() == []
    assert tmp_output_file.read_text() == ""
