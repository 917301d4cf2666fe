import json
import subprocess
import sys


def run_cli(args):
    return subprocess.run(
        [sys.executable, "-m", "snfintel.cli"] + args,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
    )


def test_cli_help():
    result = run_cli(["--help"])
    assert result.returncode == 0


def test_cli_version():
    result = run_cli(["--version"])
    assert result.returncode == 0
    assert "SNF Intel" in result.stdout


def write_snapshot(tmp_path):
    snapshot = {
        "periodId": "2024-06",
        "peers": [
            {"facilityId": "1", "facilityName": "Shaw", "state": "ID",
             "setting": "SNF", "kpiId": "snf_operating_margin_pct", "value": 18.0},
            {"facilityId": "2", "facilityName": "Creekside", "state": "OR",
             "setting": "SNF", "kpiId": "snf_operating_margin_pct", "value": -2.3},
        ],
    }
    path = tmp_path / "snapshot.json"
    path.write_text(json.dumps(snapshot), encoding="utf-8")
    return path


def test_cli_answers_from_snapshot(tmp_path):
    path = write_snapshot(tmp_path)

    result = run_cli([str(path), "who are the top performers?"])

    assert result.returncode == 0
    assert "Shaw (ID) - 18.0% margin" in result.stdout


def test_cli_missing_snapshot_fails(tmp_path):
    result = run_cli([str(tmp_path / "missing.json"), "summary"])
    assert result.returncode != 0


def test_cli_verbose_logs_debug_from_module_loggers(tmp_path):
    path = write_snapshot(tmp_path)

    quiet = run_cli([str(path), "summary"])
    verbose = run_cli(["-v", str(path), "summary"])

    assert "[DEBUG]" not in quiet.stderr
    assert "[DEBUG] Loaded 2024-06: 2 peer records, facility=None" in verbose.stderr
    assert "[DEBUG] Intent summary" in verbose.stderr
