"""
Integration tests for the smtree CLI.
"""

import json
import logging

import pytest
from click.testing import CliRunner

from smtree.cli.main import cli
from smtree.utils.logger import setup_logging


@pytest.fixture(autouse=True)
def reset_logging(monkeypatch):
    for name in ("HEIGHT", "HASHER", "LOG_LEVEL", "LOG_DIR"):
        monkeypatch.delenv(f"SMTREE_{name}", raising=False)
    yield
    # handlers created inside CliRunner point at its captured streams
    setup_logging(level=logging.WARNING)


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def leaves_file(tmp_path):
    path = tmp_path / "leaves.json"
    path.write_text(json.dumps(["a", "b", "c", "d"]))
    return path


def _line(output: str, prefix: str) -> str:
    for line in output.splitlines():
        if line.strip().startswith(prefix):
            return line.strip()[len(prefix):].strip()
    raise AssertionError(f"no line starting with {prefix!r} in:\n{output}")


BASE = ["--hasher", "sha256", "--height", "8"]


class TestZeroHashes:

    def test_lists_every_depth(self, runner):
        result = runner.invoke(cli, BASE + ["zero-hashes"])
        assert result.exit_code == 0, result.output
        assert "height=8" in result.output
        assert _line(result.output, "0:").startswith("0x")
        assert _line(result.output, "8:").startswith("0x")

    def test_bad_hasher(self, runner):
        result = runner.invoke(cli, ["--hasher", "md5", "zero-hashes"])
        assert result.exit_code != 0


class TestBuildAndVerify:

    def test_build_prints_root(self, runner, leaves_file):
        result = runner.invoke(cli, BASE + ["build", str(leaves_file)])
        assert result.exit_code == 0, result.output
        assert _line(result.output, "root:").startswith("0x")

    def test_prove_and_verify(self, runner, leaves_file, tmp_path):
        proof_path = tmp_path / "proof.json"
        result = runner.invoke(
            cli, BASE + ["build", str(leaves_file), "--prove", "2", "--output", str(proof_path)]
        )
        assert result.exit_code == 0, result.output
        root = _line(result.output, "root:")
        assert len(json.loads(proof_path.read_text())["siblings"]) == 8

        result = runner.invoke(
            cli, BASE + ["verify", str(proof_path), "--index", "2", "--leaf", "c", "--root", root]
        )
        assert result.exit_code == 0, result.output
        assert "Proof valid" in result.output

        result = runner.invoke(
            cli, BASE + ["verify", str(proof_path), "--index", "2", "--leaf", "x", "--root", root]
        )
        assert result.exit_code == 1
        assert "verification failed" in result.output

    def test_prove_at_historical_root(self, runner, leaves_file, tmp_path):
        result = runner.invoke(cli, BASE + ["build", str(leaves_file), "--history"])
        assert result.exit_code == 0, result.output
        # root after inserting "a" and "b"
        old_root = _line(result.output, "root[2]:")

        proof_path = tmp_path / "old.json"
        result = runner.invoke(
            cli,
            BASE + ["build", str(leaves_file), "--prove", "1", "--at-root", old_root,
                    "--output", str(proof_path)],
        )
        assert result.exit_code == 0, result.output

        result = runner.invoke(
            cli, BASE + ["verify", str(proof_path), "--index", "1", "--leaf", "b", "--root", old_root]
        )
        assert result.exit_code == 0, result.output

    def test_unknown_root(self, runner, leaves_file):
        result = runner.invoke(
            cli, BASE + ["build", str(leaves_file), "--prove", "1", "--at-root", "0x" + "11" * 32]
        )
        assert result.exit_code == 1
        assert "cannot find node" in result.output

    def test_index_out_of_range(self, runner, tmp_path):
        path = tmp_path / "leaves.json"
        path.write_text(json.dumps({"300": "x"}))
        result = runner.invoke(cli, BASE + ["build", str(path)])
        assert result.exit_code == 1

    def test_int_leaf(self, runner, tmp_path):
        leaves = tmp_path / "ints.json"
        leaves.write_text(json.dumps({"5": 5}))
        proof_path = tmp_path / "proof.json"
        result = runner.invoke(
            cli, BASE + ["build", str(leaves), "--prove", "5", "--output", str(proof_path)]
        )
        assert result.exit_code == 0, result.output
        root = _line(result.output, "root:")
        result = runner.invoke(
            cli,
            BASE + ["verify", str(proof_path), "--index", "5", "--leaf", "5", "--int-leaf", "--root", root],
        )
        assert result.exit_code == 0, result.output

    def test_malformed_proof(self, runner, tmp_path):
        bad = tmp_path / "bad.json"
        bad.write_text(json.dumps({"siblings": ["zz"]}))
        result = runner.invoke(
            cli, BASE + ["verify", str(bad), "--index", "0", "--leaf", "a", "--root", "0x00"]
        )
        assert result.exit_code == 1
        assert "Invalid proof" in result.output
