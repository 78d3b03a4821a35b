import pytest

from hopfetch.config import Config
from hopfetch.core import FetchOptions, get_filename_or_url
from hopfetch.core.headers import (
    build_request_headers,
    check_url,
    origin_of,
    resolve_location,
    resolve_refresh,
)
from hopfetch.exceptions import UnsupportedURLError


@pytest.mark.parametrize(
    "value, expected",
    [
        ("0; url=/d", "/d"),
        ("0; url='/d'", "/d"),
        ('0; url="/d"', "/d"),
        ("0; URL=https://example.com/x", "https://example.com/x"),
        ('attachment; filename="report.csv"', "report.csv"),
        ("attachment; filename=plain.txt", "plain.txt"),
        ("0; url=\"'/nested'\"", "'/nested'"),
        ("0; url='/unbalanced", "'/unbalanced"),
    ],
)
def test_get_filename_or_url(value, expected):
    assert get_filename_or_url(value) == expected


@pytest.mark.parametrize("value", ["0;", "5", "", "0; url=", "0; url=''"])
def test_get_filename_or_url_without_token(value):
    assert get_filename_or_url(value) is None


@pytest.mark.parametrize(
    "url, expected",
    [
        ("http://example.com/a/b?q=1", "http://example.com"),
        ("https://Example.com:443/", "https://example.com"),
        ("http://example.com:8080/x", "http://example.com:8080"),
        ("http://user:pw@example.com/", "http://example.com"),
        ("http://[::1]:8000/", "http://[::1]:8000"),
    ],
)
def test_origin_of(url, expected):
    assert origin_of(url) == expected


def test_refresh_path_is_appended_to_the_origin_literally():
    assert resolve_refresh("http://h:81/a/b?x=1", "/c/../d") == "http://h:81/c/../d"


def test_refresh_absolute_url_replaces_the_current_one():
    assert resolve_refresh("http://h/a", "https://other/b") == "https://other/b"


def test_location_replaces_path_and_query():
    assert resolve_location("http://h/a/b?x=1", "/c") == "http://h/c"
    assert resolve_location("http://h/a", "https://other/z") == "https://other/z"


def test_check_url():
    check_url("https://example.com/")
    with pytest.raises(UnsupportedURLError):
        check_url("mailto:someone@example.com")


def test_build_request_headers_layers_defaults_caller_and_body():
    config = Config(user_agent="ua/1")
    options = FetchOptions(
        headers={"accept": "application/json", "X-Extra": "1", "Content-Type": "ignored"},
        data=b"abc",
    )

    headers = build_request_headers(config, options)

    assert headers["User-Agent"] == "ua/1"
    assert headers["Accept"] == "application/json"
    assert headers["X-Extra"] == "1"
    assert headers["Content-Type"] == "application/octet-stream"
    assert headers["Content-Length"] == "3"
    assert len(headers.getall("Accept")) == 1


def test_build_request_headers_without_body():
    headers = build_request_headers(Config(), FetchOptions())

    assert headers["Accept"] == "*/*"
    assert "Content-Type" not in headers
    assert "Content-Length" not in headers
