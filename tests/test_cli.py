from __future__ import annotations

import shlex

import pytest
from typer.testing import CliRunner

from animebatch import __version__
from animebatch.cli.main import app


runner = CliRunner()

ENV_VARS = [
    "OUTPUT_DIR",
    "EXPORT_LIMIT",
    "EXPORTER_COMMAND",
    "EXPORTER_CWD",
    "FTP_HOST",
    "FTP_PORT",
    "FTP_USER",
    "FTP_PASS",
    "FTP_PATH",
    "SLACK_WEBHOOK",
    "LOG_LEVEL",
    "LOG_FILE",
]

EXPORTER = """
import sys
sys.stderr.write("Found 3 anime\\n")
sys.stderr.write("LIMIT=" + sys.argv[2] + "\\n")
sys.stdout.write("INSERT INTO anime VALUES (1);\\n")
sys.exit(int(__import__("os").environ.get("FAKE_EXIT", "0")))
"""


class RecordingFTP:
    instances: list["RecordingFTP"] = []

    def __init__(self):
        self.stored: dict[str, bytes] = {}
        RecordingFTP.instances.append(self)

    def connect(self, host, port):
        self.address = (host, port)

    def login(self, user, passwd):
        self.credentials = (user, passwd)

    def storbinary(self, cmd, fp):
        self.stored[cmd.removeprefix("STOR ")] = fp.read()

    def quit(self):
        pass

    def close(self):
        pass


@pytest.fixture
def cli_env(tmp_path, monkeypatch, export_config):
    monkeypatch.chdir(tmp_path)
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.delenv("FAKE_EXIT", raising=False)
    monkeypatch.setenv("OUTPUT_DIR", str(tmp_path / "output"))
    monkeypatch.setenv("EXPORTER_COMMAND", shlex.join(export_config(EXPORTER).command))
    RecordingFTP.instances.clear()
    monkeypatch.setattr("animebatch.core.transfer.ftp.ftplib.FTP", RecordingFTP)
    return tmp_path


def _batch_files(root):
    return sorted((root / "output").glob("anime_batch_*.sql"))


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_cli_limit_without_upload_or_webhook(cli_env):
    result = runner.invoke(app, ["100"])

    assert result.exit_code == 0, result.output
    assert "Found 3 anime" in result.output
    assert "Limit: 100" in result.output
    assert "FTP not configured" in result.output
    assert RecordingFTP.instances == []

    files = _batch_files(cli_env)
    assert len(files) == 1
    assert files[0].read_text() == "INSERT INTO anime VALUES (1);\n"


def test_env_limit_and_ftp_upload(cli_env, monkeypatch):
    monkeypatch.setenv("EXPORT_LIMIT", "50")
    monkeypatch.setenv("FTP_HOST", "ftp.example.com")
    monkeypatch.setenv("FTP_USER", "anime")
    monkeypatch.setenv("FTP_PASS", "secret")
    monkeypatch.setenv("FTP_PATH", "/public_html/animes")
    monkeypatch.setenv("LOG_FILE", str(cli_env / "logs" / "run.log"))

    result = runner.invoke(app, [])

    assert result.exit_code == 0, result.output
    assert "Limit: 50" in result.output

    files = _batch_files(cli_env)
    assert len(files) == 1
    (ftp,) = RecordingFTP.instances
    assert ftp.address == ("ftp.example.com", 21)
    assert ftp.credentials == ("anime", "secret")
    assert ftp.stored == {
        f"/public_html/animes/{files[0].name}": b"INSERT INTO anime VALUES (1);\n",
    }

    log_text = (cli_env / "logs" / "run.log").read_text(encoding="utf-8")
    assert '"message":"Upload complete"' in log_text


def test_limit_reaches_exporter(cli_env, monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")

    result = runner.invoke(app, ["0"])

    assert result.exit_code == 0, result.output
    assert "LIMIT=0" in result.output
    assert "Limit: all" in result.output


def test_export_failure_exits_1(cli_env, monkeypatch):
    monkeypatch.setenv("FAKE_EXIT", "3")
    monkeypatch.setenv("FTP_HOST", "ftp.example.com")
    monkeypatch.setenv("FTP_USER", "anime")
    monkeypatch.setenv("FTP_PASS", "secret")

    result = runner.invoke(app, ["5"])

    assert result.exit_code == 1
    assert "exited with code 3" in result.output
    assert RecordingFTP.instances == []


def test_invalid_export_limit_env(cli_env, monkeypatch):
    monkeypatch.setenv("EXPORT_LIMIT", "many")

    result = runner.invoke(app, [])

    assert result.exit_code == 1
    assert "Error loading configuration" in result.output


def test_negative_cli_limit_is_a_usage_error(cli_env):
    result = runner.invoke(app, ["--", "-5"])
    assert result.exit_code == 2
