"""Test the command-line entry point."""
from pathlib import Path

import pytest

from keypad_calculator.main import build_output_path, main


@pytest.mark.parametrize("name,expected", [
    ("operations_short.7z", "operations_short_7z_results.txt"),
    ("ops.txt", "ops_txt_results.txt"),
    ("ops.tar.xz", "ops_tar_xz_results.txt"),
])
def test_build_output_path(tmp_path: Path, name: str, expected: str) -> None:
    assert build_output_path(tmp_path / name) == tmp_path / expected


def test_eval_prints_display_values(capsys) -> None:
    assert main(["eval", "2+3*4", "7/2", "(2+3)*4"]) == 0
    assert capsys.readouterr().out.splitlines() == ["14", "3.5", "20"]


def test_eval_reports_failure(capsys) -> None:
    assert main(["eval", "1+1", "2/0"]) == 1
    assert capsys.readouterr().out.splitlines() == ["2", "Error"]


def test_keys_prints_screen(capsys) -> None:
    assert main(["keys", "(2+3)×4="]) == 0
    assert capsys.readouterr().out.splitlines() == ["(2+3)*4", "20"]


def test_keys_rejects_unknown_key(capsys) -> None:
    with pytest.raises(SystemExit) as exc_info:
        main(["keys", "2a"])
    assert exc_info.value.code == 2


def test_batch_writes_results(tmp_path: Path, capsys) -> None:
    input_file = tmp_path / "ops.txt"
    input_file.write_text("1+1\n2^10\n")
    output_file = tmp_path / "out.txt"

    assert main(["batch", str(input_file), "--output", str(output_file), "--workers", "1"]) == 0
    assert sorted(output_file.read_text().splitlines()) == ["1+1 = 2", "2^10 = 1024"]
    assert "2 expressions evaluated" in capsys.readouterr().out


def test_batch_default_output_path(tmp_path: Path) -> None:
    input_file = tmp_path / "ops.txt"
    input_file.write_text("1/0\n")

    assert main(["batch", str(input_file)]) == 1
    assert (tmp_path / "ops_txt_results.txt").read_text().startswith("1/0 -> ERROR")


def test_batch_missing_file(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as exc_info:
        main(["batch", str(tmp_path / "missing.txt")])
    assert exc_info.value.code == 2
