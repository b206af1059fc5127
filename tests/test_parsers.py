import re

import pytest

from stdkit.parsers import must_compile_regexp, must_parse_url


def test_valid_url():
    parsed = must_parse_url("http://something-profound-localhost.com")
    assert parsed.scheme == "http"
    assert parsed.hostname == "something-profound-localhost.com"


def test_invalid_url():
    with pytest.raises(ValueError):
        must_parse_url("invalid_url:is_here\\")


def test_relative_path_url():
    parsed = must_parse_url("/config")
    assert parsed.path == "/config"
    assert parsed.scheme == ""


def test_url_with_bad_port():
    with pytest.raises(ValueError):
        must_parse_url("http://localhost:abc/")


def test_url_missing_scheme():
    with pytest.raises(ValueError):
        must_parse_url(":nothing")


def test_url_with_control_character():
    with pytest.raises(ValueError):
        must_parse_url("http://localhost/\x01")


def test_valid_regexp():
    pattern = must_compile_regexp("^(?:[0-9]{1,3}\\.){3}[0-9]{1,3}$")
    assert pattern.match("10.0.0.1") is not None
    assert pattern.match("10.0.0") is None


def test_invalid_regexp():
    with pytest.raises(re.error):
        must_compile_regexp("^(")