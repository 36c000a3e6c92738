"""
Tests for the command-line entry point.
"""

from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from caching_proxy.cli import EXIT_CONFIGURATION_ERROR, app

runner = CliRunner()


@pytest.fixture
def uvicorn_run():
    with patch("caching_proxy.cli.uvicorn.run") as run:
        yield run


def test_starts_server_with_port_and_target(uvicorn_run, tmp_path):
    result = runner.invoke(app, ["9090", "http://origin.test", "--cache-dir", str(tmp_path), "--host", "127.0.0.1"])

    assert result.exit_code == 0, result.output
    uvicorn_run.assert_called_once()
    kwargs = uvicorn_run.call_args.kwargs
    assert kwargs["port"] == 9090
    assert kwargs["host"] == "127.0.0.1"
    proxy_app = uvicorn_run.call_args.args[0]
    assert proxy_app.state.settings.target_url == "http://origin.test"
    assert proxy_app.state.settings.cache_dir == str(tmp_path)


@pytest.mark.parametrize("target", ["not a url", "ftp://origin.test", "/relative/path", "http://"])
def test_malformed_target_url_exits_non_zero(uvicorn_run, target):
    result = runner.invoke(app, ["8080", target])
    assert result.exit_code == EXIT_CONFIGURATION_ERROR
    uvicorn_run.assert_not_called()


def test_out_of_range_port_exits_non_zero(uvicorn_run):
    result = runner.invoke(app, ["70000", "http://origin.test"])
    assert result.exit_code == EXIT_CONFIGURATION_ERROR
    uvicorn_run.assert_not_called()


def test_non_numeric_port_is_a_usage_error(uvicorn_run):
    result = runner.invoke(app, ["http", "http://origin.test"])
    assert result.exit_code != 0
    uvicorn_run.assert_not_called()


def test_missing_arguments_is_a_usage_error(uvicorn_run):
    result = runner.invoke(app, [])
    assert result.exit_code != 0
    uvicorn_run.assert_not_called()


def test_unknown_backend_exits_non_zero(uvicorn_run):
    result = runner.invoke(app, ["8080", "http://origin.test", "--backend", "memcached"])
    assert result.exit_code == EXIT_CONFIGURATION_ERROR
    uvicorn_run.assert_not_called()
