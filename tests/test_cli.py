import pytest
from click.testing import CliRunner

from hopfetch.cli import main as cli_main
from hopfetch.config import Config
from hopfetch.core import DownloadHandle
from hopfetch.exceptions import RedirectError


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    path = tmp_path / "config.json"
    monkeypatch.setattr(Config, "get_default_config_path", classmethod(lambda cls: path))
    return path


@pytest.fixture
def runner():
    return CliRunner()


def test_fetch_prints_text(runner, monkeypatch):
    calls = []

    async def fake_fetch_text(url, config=None, **options):
        calls.append((url, config, options))
        return "hello"

    monkeypatch.setattr(cli_main, "fetch_text", fake_fetch_text)

    result = runner.invoke(cli_main.cli, [
        "fetch", "http://example.com/",
        "-X", "POST",
        "-H", "X-Token: abc",
        "-d", "body",
        "--max-redirects", "3",
        "--timeout", "2.5",
    ])

    assert result.exit_code == 0, result.output
    assert "hello" in result.output

    [(url, config, options)] = calls
    assert url == "http://example.com/"
    assert config.max_redirects == 3
    assert config.timeout == 2.5
    assert options["method"] == "POST"
    assert options["headers"] == {"X-Token": "abc"}
    assert options["data"] == b"body"


def test_fetch_error_exits_with_status_1(runner, monkeypatch):
    async def failing(url, config=None, **options):
        raise RedirectError("No redirection to follow", url=url, status=302)

    monkeypatch.setattr(cli_main, "fetch_text", failing)

    result = runner.invoke(cli_main.cli, ["fetch", "http://example.com/"])

    assert result.exit_code == 1


def test_fetch_rejects_malformed_header(runner):
    result = runner.invoke(cli_main.cli, ["fetch", "http://example.com/", "-H", "no-colon"])

    assert result.exit_code == 2


def test_quiet_download_prints_the_path(runner, monkeypatch, tmp_path):
    target = tmp_path / "file.bin"

    async def fake_download_file(url, output=None, config=None, **options):
        return DownloadHandle(path=output, bytes_written=3, closed=True, status=200, url=url)

    monkeypatch.setattr(cli_main, "download_file", fake_download_file)

    result = runner.invoke(cli_main.cli, ["download", "http://example.com/f", "-o", str(target), "-q"])

    assert result.exit_code == 0, result.output
    assert result.output.strip() == str(target)


def test_config_command_shows_settings(runner, isolated_config):
    Config(max_redirects=7).save(isolated_config)

    result = runner.invoke(cli_main.cli, ["config"])

    assert result.exit_code == 0, result.output
    assert "Max Redirects" in result.output
    assert "7" in result.output
