import subprocess
import sys

import pytest

from advsched import ni_runner
from advsched.numerical_integration import main
from advsched.parsing_utils import parser_instance


def test_parser():
    args = parser_instance().parse_args(["1", "0", "10", "1000", "1"])
    assert (args.function_id, args.lower_bound, args.upper_bound, args.points, args.intensity) == \
        (1, 0.0, 10.0, 1000, 1)
    assert args.timeout is None
    assert not args.debug


def test_too_few_points_is_fatal(capsys):
    assert main(["1", "0", "10", "999", "1"]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "1000" in captured.err


def test_invalid_function_is_fatal(capsys):
    assert main(["7", "0", "10", "1000", "1"]) == 1
    assert "usage" in capsys.readouterr().err


def test_missing_arguments():
    with pytest.raises(SystemExit) as excinfo:
        main(["1", "0", "10"])
    assert excinfo.value.code != 0


def test_module_entry_point_exit_status():
    completed = subprocess.run([sys.executable, "-m", "advsched", "1", "0", "10", "999", "1"],
                               stdout=subprocess.PIPE, stderr=subprocess.PIPE)
    assert completed.returncode == 1
    assert completed.stdout == b""


def test_runner_command_and_output_parsing():
    args = ni_runner.parser.parse_args(["--jobs", "4", "--timeout", "5", "--intensity", "2"])
    command = ni_runner.build_command(args, 4, 3, 20000)
    assert command[:3] == ["mpiexec", "-n", "4"]
    assert command[3:6] == [sys.executable, "-m", "advsched"]
    assert command[6:11] == ["3", "0.0", "10.0", "20000", "2"]
    assert "--timeout=5.0" in command

    assert ni_runner.parse_output("10\n", "Node[1] exiting\n0.012000\n") == (10.0, 0.012)
    assert ni_runner.parse_output("2\n", "0.5\nNode[2] Node exiting\n") == (2.0, 0.5)


def test_runner_writes_csv(tmp_path, monkeypatch):
    class _Popen:
        returncode = 0

        def __init__(self, cmd_args, stdout, stderr):
            self.cmd_args = cmd_args

        def communicate(self):
            return b"10\n", b"0.25\n"

    monkeypatch.setattr(ni_runner.subprocess, "Popen", _Popen)
    out_file = tmp_path / "out.csv"
    outputs = ni_runner.main(["--jobs", "2", "3", "--times", "2", "--out_csv_file", str(out_file)])

    assert [out['jobs'] for out in outputs] == [2, 3]
    assert all(out['avg_value'] == 10.0 and out['avg_reported_time'] == 0.25 for out in outputs)
    lines = out_file.read_text().splitlines()
    assert lines[0].split(';') == ni_runner.CSV_HEADER
    assert len(lines) == 3


def test_single_process_run_prints_value_and_elapsed(capsys):
    # one process is the controller alone, so nothing gets integrated
    assert main(["1", "0", "10", "1000", "1"]) == 0
    captured = capsys.readouterr()
    assert float(captured.out.strip()) == 0.0
    assert float(captured.err.strip().splitlines()[-1]) >= 0.0
