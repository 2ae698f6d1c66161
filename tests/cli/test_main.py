"""Tests for the histgrab command."""

import json
import zipfile

import pytest
from click.testing import CliRunner

from histgrab.cli import main as main_module
from histgrab.cli.main import EXIT_ERROR, EXIT_INVALID_ARGS, EXIT_SUCCESS, cli, main


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def alice_profile(make_history):
    """Chrome and Firefox history for alice, none for Edge."""
    return [
        make_history("chrome", "Default", content=b"chrome"),
        make_history("firefox", "Profiles", "a.default", content=b"firefox"),
    ]


def _args(system_root, output_dir, *extra):
    return [
        "--user", "alice",
        "--system-root", str(system_root),
        "--destination", str(output_dir),
        *extra,
    ]


class TestDiscovery:
    """Tests for discovery without --gather."""

    def test_human_listing(self, runner, system_root, output_dir, alice_profile) -> None:
        """Each discovered path is printed with its browser tag."""
        result = runner.invoke(cli, _args(system_root, output_dir))

        assert result.exit_code == EXIT_SUCCESS
        assert result.stdout.splitlines() == [
            f"[chrome] {alice_profile[0].absolute()}",
            f"[firefox] {alice_profile[1].absolute()}",
        ]
        assert list(output_dir.iterdir()) == []

    def test_json_listing(self, runner, system_root, output_dir, alice_profile) -> None:
        """JSON output carries the files and per-browser counts."""
        result = runner.invoke(cli, _args(system_root, output_dir, "--format", "json"))

        data = json.loads(result.stdout)
        assert data["target_user"] == "alice"
        assert data["counts"] == {"chrome": 1, "edge": 0, "firefox": 1}
        assert [f["browser"] for f in data["files"]] == ["chrome", "firefox"]

    def test_jsonl_listing(self, runner, system_root, output_dir, alice_profile) -> None:
        result = runner.invoke(cli, _args(system_root, output_dir, "--format", "jsonl"))

        records = [json.loads(line) for line in result.stdout.splitlines()]
        assert [r["path"] for r in records] == [str(p.absolute()) for p in alice_profile]

    def test_nothing_found(self, runner, system_root, output_dir) -> None:
        """A user without browser profiles is not an error."""
        result = runner.invoke(cli, _args(system_root, output_dir))

        assert result.exit_code == EXIT_SUCCESS
        assert "No browser history databases found." in result.stdout

    def test_run_id_logged(self, runner, system_root, output_dir) -> None:
        """The diagnostic trace on stderr names the run."""
        result = runner.invoke(cli, _args(system_root, output_dir))

        assert "Run " in result.stderr
        assert "searching browser history for user 'alice'" in result.stderr


class TestGather:
    """Tests for --gather."""

    def test_gather_writes_archive(self, runner, system_root, output_dir, alice_profile) -> None:
        """Gather produces <run id>.zip and removes staging."""
        result = runner.invoke(
            cli, _args(system_root, output_dir, "--gather", "--format", "json")
        )

        assert result.exit_code == EXIT_SUCCESS
        listing, collection = (json.loads(line) for line in result.stdout.splitlines())
        assert collection["success"] is True
        assert collection["run_id"] == listing["run_id"]

        archives = list(output_dir.iterdir())
        assert [a.name for a in archives] == [f"{listing['run_id']}.zip"]
        with zipfile.ZipFile(archives[0]) as zf:
            assert zf.read("history_db_0") == b"chrome"
            assert zf.read("history_db_1") == b"firefox"

    def test_jsonl_layout(self, runner, system_root, output_dir, alice_profile) -> None:
        """JSONL prints one line per discovered file, then the collection result."""
        result = runner.invoke(
            cli, _args(system_root, output_dir, "--gather", "--format", "jsonl")
        )

        records = [json.loads(line) for line in result.stdout.splitlines()]
        assert len(records) == len(alice_profile) + 1
        assert [r["browser"] for r in records[:-1]] == ["chrome", "firefox"]
        assert records[-1]["success"] is True
        assert len(records[-1]["copied"]) == 2

    def test_human_summary(self, runner, system_root, output_dir, alice_profile) -> None:
        result = runner.invoke(cli, _args(system_root, output_dir, "-g"))

        assert result.exit_code == EXIT_SUCCESS
        assert "Collection" in result.stdout
        assert "copied: 2" in result.stdout

    def test_suppress_is_silent(self, runner, system_root, output_dir, alice_profile) -> None:
        """--suppress silences output but still writes the archive."""
        result = runner.invoke(cli, _args(system_root, output_dir, "--gather", "--suppress"))

        assert result.exit_code == EXIT_SUCCESS
        assert result.stdout == ""
        assert result.stderr == ""
        assert len(list(output_dir.glob("*.zip"))) == 1

    def test_archive_failure_exit_code(
        self, runner, system_root, output_dir, alice_profile, monkeypatch
    ) -> None:
        """A run that cannot write its archive exits non-zero."""

        def broken_zip(*args, **kwargs):
            raise OSError(28, "No space left on device")

        monkeypatch.setattr(zipfile, "ZipFile", broken_zip)

        result = runner.invoke(cli, _args(system_root, output_dir, "--gather"))

        assert result.exit_code == EXIT_ERROR
        assert "archive: not written" in result.stdout
        assert list(output_dir.iterdir()) == []


class TestArguments:
    """Tests for argument validation."""

    def test_invalid_user(self, runner, system_root, output_dir) -> None:
        """A user name with path separators is rejected as a structured error."""
        result = runner.invoke(
            cli,
            [
                "--user", "../bob",
                "--system-root", str(system_root),
                "--destination", str(output_dir),
                "--format", "json",
            ],
        )

        assert result.exit_code == EXIT_INVALID_ARGS
        error = json.loads(result.stdout)
        assert error["code"] == "VALIDATION_ERROR"

    def test_version(self, runner) -> None:
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert "histgrab" in result.stdout


def test_unexpected_error_is_structured(monkeypatch, capsys) -> None:
    """main reports an unexpected exception as INTERNAL_ERROR and exits 1."""

    def crashing_cli() -> None:
        raise RuntimeError("boom")

    monkeypatch.setattr(main_module, "cli", crashing_cli)

    with pytest.raises(SystemExit) as exc_info:
        main()

    assert exc_info.value.code == EXIT_ERROR
    captured = capsys.readouterr()
    error = json.loads(captured.out)
    assert error["code"] == "INTERNAL_ERROR"
    assert error["message"] == "boom"
    assert error["context"] == {"type": "RuntimeError"}
    assert "Error: boom" in captured.err
