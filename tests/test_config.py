import json

import aiohttp
import pytest

from hopfetch import __version__
from hopfetch.config import Config
from hopfetch.exceptions import ConfigError


def test_defaults():
    config = Config()

    assert config.user_agent == f"hopfetch/{__version__} aiohttp/{aiohttp.__version__}"
    assert config.accept == "*/*"
    assert config.max_redirects == 20
    assert config.timeout is None


def test_missing_file_gives_defaults(tmp_path):
    config = Config.load(tmp_path / "absent.json")

    assert config.max_redirects == 20


def test_save_then_load(tmp_path):
    path = tmp_path / "config.json"
    Config(max_redirects=None, timeout=12.5, download_dir="/srv/dl").save(path)

    saved = json.loads(path.read_text())
    loaded = Config.load(path)

    assert "_config_path" not in saved
    assert loaded.max_redirects is None
    assert loaded.timeout == 12.5
    assert loaded.download_dir == "/srv/dl"


def test_unknown_keys_are_rejected(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"threads_per_download": 8}))

    with pytest.raises(ConfigError, match="threads_per_download"):
        Config.load(path)


def test_invalid_json_is_rejected(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json")

    with pytest.raises(ConfigError):
        Config.load(path)
