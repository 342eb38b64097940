"""Tests for the bucketstore CLI.

Commands run against the filesystem backend in a temporary base directory
so state carries across invocations.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import pytest

from bucketstore.cli import main
from bucketstore.observability.tracing import get_test_spans, reset_tracing


@pytest.fixture
def run_cli(temp_storage_dir: Path, capsys: pytest.CaptureFixture[str]) -> Any:
    """Return a runner that invokes the CLI and parses its JSON output."""

    def run(*args: str) -> tuple[int, dict[str, Any]]:
        code = main(["--base-dir", str(temp_storage_dir), "--root", "/data", *args])
        out = capsys.readouterr().out
        return code, json.loads(out)

    return run


class TestBucketCommands:
    """Tests for mkdir / ls / rmdir."""

    def test_mkdir_then_ls(self, run_cli: Any) -> None:
        code, result = run_cli("mkdir", "reports")
        assert code == 0
        assert result == {"name": "reports", "ok": True}

        code, result = run_cli("ls")
        assert code == 0
        assert result["contents"] == ["reports"]

    def test_mkdir_existing_fails(self, run_cli: Any) -> None:
        run_cli("mkdir", "reports")

        code, result = run_cli("mkdir", "reports")

        assert code == 2
        assert result["ok"] is False
        assert result["error"]["code"] == "OPERATION_FAILED"

    def test_mkdir_outside_root_fails(self, run_cli: Any, temp_storage_dir: Path) -> None:
        code, result = run_cli("mkdir", "../escape")

        assert code == 2
        assert result["error"]["message"] == "Cannot create a bucket outside the root bucket"
        assert not (temp_storage_dir / "escape").exists()

    def test_ls_missing_bucket(self, run_cli: Any) -> None:
        code, result = run_cli("ls", "missing")

        assert code == 2
        assert result["error"]["code"] == "NOT_FOUND"

    def test_rmdir(self, run_cli: Any) -> None:
        run_cli("mkdir", "reports")

        code, _ = run_cli("rmdir", "reports")

        assert code == 0
        assert run_cli("ls")[1]["contents"] == []


class TestObjectCommands:
    """Tests for put / get / rm / stat."""

    def test_put_then_get(self, run_cli: Any) -> None:
        code, _ = run_cli("put", "note.txt", "--data", "hello")
        assert code == 0

        code, result = run_cli("get", "note.txt")

        assert code == 0
        assert result["text"] == "hello"
        assert result["size_bytes"] == 5
        assert result["sha256"] == hashlib.sha256(b"hello").hexdigest()

    def test_put_from_file_and_get_to_file(self, run_cli: Any, tmp_path: Path) -> None:
        source = tmp_path / "in.bin"
        source.write_bytes(bytes(range(256)))
        target = tmp_path / "out.bin"

        assert run_cli("put", "blob", "--input", str(source))[0] == 0
        code, result = run_cli("get", "blob", "--out", str(target))

        assert code == 0
        assert result["out"] == str(target)
        assert "text" not in result
        assert target.read_bytes() == bytes(range(256))

    def test_put_into_missing_bucket_fails(self, run_cli: Any) -> None:
        code, result = run_cli("put", "reports/q1.csv", "--data", "1,2")

        assert code == 2
        assert (
            result["error"]["message"]
            == "Cannot create object reports/q1.csv inside a non-existent bucket."
        )

    def test_get_missing_object(self, run_cli: Any) -> None:
        code, result = run_cli("get", "nothing")

        assert code == 2
        assert result["error"]["code"] == "NOT_FOUND"

    def test_rm(self, run_cli: Any) -> None:
        run_cli("put", "note.txt", "--data", "hello")

        assert run_cli("rm", "note.txt")[0] == 0
        assert run_cli("get", "note.txt")[0] == 2

    def test_stat(self, run_cli: Any) -> None:
        run_cli("put", "note.txt", "--data", "hello")

        code, result = run_cli("stat", "note.txt")

        assert code == 0
        assert result["is_object"] is True
        assert result["is_bucket"] is False
        assert result["is_local"] is True


class TestFailures:
    """Tests for configuration and construction failures."""

    def test_root_that_is_an_object(self, run_cli: Any, temp_storage_dir: Path) -> None:
        run_cli("put", "blob", "--data", "x")

        code = main(["--base-dir", str(temp_storage_dir), "--root", "/data/blob", "ls"])

        assert code == 1

    def test_invalid_config(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        monkeypatch.setenv("BUCKETSTORE_LOG_LEVEL", "LOUD")

        code = main(["--backend", "memory", "ls"])

        result = json.loads(capsys.readouterr().out)
        assert code == 1
        assert result["error"]["code"] == "INVALID_CONFIG"

    def test_no_command_prints_help(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main([]) == 0
        assert "usage" in capsys.readouterr().out


class TestTracing:
    """Tests for span export from the console script."""

    def test_enabled_tracing_captures_command_spans(
        self, run_cli: Any, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("BUCKETSTORE_OTEL_ENABLED", "1")
        monkeypatch.setenv("BUCKETSTORE_OTEL_TEST_CAPTURE", "1")
        reset_tracing()
        try:
            code, _ = run_cli("mkdir", "reports")

            names = [s.name for s in get_test_spans()]
            assert code == 0
            assert "bucketstore.create_bucket" in names
        finally:
            reset_tracing()
