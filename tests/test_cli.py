"""Tests for cli.py - commands end to end through a subprocess."""

import json
import os
import subprocess
import sys


def _run_eotrle(tmp_path, *args, env=None):
    home = tmp_path / "home"
    home.mkdir(exist_ok=True)
    full_env = {k: v for k, v in os.environ.items() if not k.startswith("EOTRLE_")}
    full_env["HOME"] = str(home)
    full_env.update(env or {})
    return subprocess.run(
        [sys.executable, "-m", "eotrle.cli", *args],
        capture_output=True, text=True, timeout=30, cwd=tmp_path, env=full_env,
    )


class TestCLIHelp:
    def test_help(self, tmp_path):
        r = _run_eotrle(tmp_path, "--help")
        assert r.returncode == 0
        assert "eotrle" in r.stdout

    def test_no_command_prints_help(self, tmp_path):
        r = _run_eotrle(tmp_path)
        assert r.returncode == 0
        assert "encode" in r.stdout

    def test_encode_help(self, tmp_path):
        r = _run_eotrle(tmp_path, "encode", "--help")
        assert r.returncode == 0
        assert "--escape-marker" in r.stdout


class TestCLICodec:
    def test_encode_then_decode(self, tmp_path):
        payload = bytes([0] * 6 + [1] * 6)
        (tmp_path / "data.bin").write_bytes(payload)
        r = _run_eotrle(tmp_path, "encode", "data.bin")
        assert r.returncode == 0, r.stderr
        assert (tmp_path / "data.bin.rle").read_bytes() == bytes([4, 0, 0, 0, 6, 0, 4, 0, 0, 0, 6, 1])

        (tmp_path / "data.bin").unlink()
        r = _run_eotrle(tmp_path, "decode", "data.bin.rle")
        assert r.returncode == 0, r.stderr
        assert (tmp_path / "data.bin").read_bytes() == payload

    def test_decode_truncated_fails(self, tmp_path):
        (tmp_path / "bad.rle").write_bytes(bytes([1, 4, 0]))
        r = _run_eotrle(tmp_path, "decode", "bad.rle")
        assert r.returncode == 1
        assert "truncated block at offset 1" in r.stderr

    def test_decode_lenient(self, tmp_path):
        (tmp_path / "bad.rle").write_bytes(bytes([1, 4, 0]))
        r = _run_eotrle(tmp_path, "decode", "bad.rle", "-o", "out", "--lenient")
        assert r.returncode == 0
        assert (tmp_path / "out").read_bytes() == bytes([1, 4, 0])

    def test_missing_file(self, tmp_path):
        r = _run_eotrle(tmp_path, "encode", "nope.bin")
        assert r.returncode == 1

    def test_verify_collision(self, tmp_path):
        (tmp_path / "d").write_bytes(bytes([4, 0, 0, 0, 2, 7, 1]))
        r = _run_eotrle(tmp_path, "verify", "d", "--json")
        assert r.returncode == 1
        assert json.loads(r.stdout)["is_lossless"] is False

        r = _run_eotrle(tmp_path, "verify", "d", "--escape-marker", "--json")
        assert r.returncode == 0
        assert json.loads(r.stdout)["is_lossless"] is True

    def test_escape_marker_from_env(self, tmp_path):
        (tmp_path / "d").write_bytes(bytes([4]))
        r = _run_eotrle(tmp_path, "verify", "d", "--json", env={"EOTRLE_ESCAPE_MARKER": "1"})
        assert r.returncode == 0
        assert json.loads(r.stdout)["encoded_size"] == 6

    def test_stats_json(self, tmp_path):
        (tmp_path / "d").write_bytes(bytes([0] * 63 + [64, 64, 230]))
        r = _run_eotrle(tmp_path, "stats", "d", "--json")
        assert r.returncode == 0
        s = json.loads(r.stdout)
        assert s["encoded_size"] == 9
        assert s["longest_run"] == 63


class TestCLIConfig:
    def test_set_and_get(self, tmp_path):
        r = _run_eotrle(tmp_path, "config", "set", "verify", "true")
        assert r.returncode == 0
        assert json.loads((tmp_path / ".eotrle.json").read_text()) == {"verify": True}
        r = _run_eotrle(tmp_path, "config", "get", "verify")
        assert r.stdout.strip() == "True"

    def test_set_global(self, tmp_path):
        r = _run_eotrle(tmp_path, "config", "set", "metrics", "off", "--global")
        assert r.returncode == 0
        assert json.loads((tmp_path / "home" / ".eotrle" / "config.json").read_text()) == {"metrics": False}

    def test_unknown_key(self, tmp_path):
        r = _run_eotrle(tmp_path, "config", "set", "threshold", "7")
        assert r.returncode == 1

    def test_not_a_bool(self, tmp_path):
        r = _run_eotrle(tmp_path, "config", "set", "verify", "sometimes")
        assert r.returncode == 1

    def test_list(self, tmp_path):
        r = _run_eotrle(tmp_path, "config", "list")
        assert r.returncode == 0
        assert "escape_marker" in r.stdout
        assert "(default)" in r.stdout


class TestCLIMetrics:
    def test_encode_records(self, tmp_path):
        (tmp_path / "d").write_bytes(bytes([9] * 60))
        _run_eotrle(tmp_path, "encode", "d")
        r = _run_eotrle(tmp_path, "metrics", "--json")
        s = json.loads(r.stdout)
        assert s["ops"] == {"encode": 1}
        assert s["encode_ratio"] == 10.0

    def test_metrics_disabled(self, tmp_path):
        (tmp_path / "d").write_bytes(bytes([9] * 60))
        _run_eotrle(tmp_path, "encode", "d", env={"EOTRLE_METRICS": "false"})
        r = _run_eotrle(tmp_path, "metrics", "--json")
        assert json.loads(r.stdout)["total"] == 0


class TestCLIOverrides:
    def test_no_escape_marker_beats_config(self, tmp_path):
        (tmp_path / "d").write_bytes(bytes([4]))
        _run_eotrle(tmp_path, "config", "set", "escape_marker", "true")
        r = _run_eotrle(tmp_path, "encode", "d", "-o", "on.rle")
        assert r.returncode == 0
        assert (tmp_path / "on.rle").read_bytes() == bytes([4, 0, 0, 0, 1, 4])
        r = _run_eotrle(tmp_path, "encode", "d", "-o", "off.rle", "--no-escape-marker")
        assert r.returncode == 0
        assert (tmp_path / "off.rle").read_bytes() == bytes([4])

    def test_escape_marker_beats_config(self, tmp_path):
        (tmp_path / "d").write_bytes(bytes([4]))
        _run_eotrle(tmp_path, "config", "set", "escape_marker", "false")
        r = _run_eotrle(tmp_path, "verify", "d", "--escape-marker", "--json")
        assert json.loads(r.stdout)["encoded_size"] == 6

    def test_strict_beats_config(self, tmp_path):
        (tmp_path / "bad.rle").write_bytes(bytes([1, 4, 0]))
        _run_eotrle(tmp_path, "config", "set", "strict", "false")
        r = _run_eotrle(tmp_path, "decode", "bad.rle", "-o", "out")
        assert r.returncode == 0
        r = _run_eotrle(tmp_path, "decode", "bad.rle", "-o", "out2", "--strict")
        assert r.returncode == 1
        assert not (tmp_path / "out2").exists()

    def test_lenient_beats_config(self, tmp_path):
        (tmp_path / "bad.rle").write_bytes(bytes([1, 4, 0]))
        _run_eotrle(tmp_path, "config", "set", "strict", "true")
        r = _run_eotrle(tmp_path, "decode", "bad.rle", "-o", "out", "--lenient")
        assert r.returncode == 0

    def test_strict_and_lenient_conflict(self, tmp_path):
        (tmp_path / "bad.rle").write_bytes(bytes([1, 4, 0]))
        r = _run_eotrle(tmp_path, "decode", "bad.rle", "--strict", "--lenient")
        assert r.returncode == 2


class TestCLILimits:
    def test_max_output_refuses(self, tmp_path):
        (tmp_path / "big.rle").write_bytes(bytes([4, 255, 255, 255, 255, 0]))
        r = _run_eotrle(tmp_path, "decode", "big.rle", "--max-output", "1000")
        assert r.returncode == 1
        assert "exceed 1000 bytes" in r.stderr

    def test_verify_huge_misread_block(self, tmp_path):
        (tmp_path / "d").write_bytes(bytes([4, 255, 255, 255, 255, 7]))
        r = _run_eotrle(tmp_path, "verify", "d", "--json")
        assert r.returncode == 1
        assert json.loads(r.stdout)["is_lossless"] is False
