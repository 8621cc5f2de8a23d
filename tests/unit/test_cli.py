"""Tests for the command-line interface."""

import json

import httpx
import pytest

from tests.mocks.ddg_pages import FakeUpstream
from websearch_gateway import cli
from websearch_gateway.config import Settings
from websearch_gateway.gateway.search_gateway import SearchGateway


@pytest.fixture
def gateway() -> SearchGateway:
    return SearchGateway(config=Settings(), transport=FakeUpstream().transport)


class TestSingleSearch:
    """run_single_search output and exit codes."""

    def test_pretty_output(self, gateway: SearchGateway, capsys):
        exit_code = cli.run_single_search("python asyncio", max_results=2, gateway=gateway)

        out = capsys.readouterr().out
        assert exit_code == 0
        assert "2 result(s) for: python asyncio (web)" in out
        assert "1. Python & asyncio - Official Docs" in out
        assert "https://www.realpython.com/async-io-python/" in out

    def test_json_output_matches_api_shape(self, gateway: SearchGateway, capsys):
        exit_code = cli.run_single_search("python asyncio", output_format="json", gateway=gateway)

        payload = json.loads(capsys.readouterr().out)
        assert exit_code == 0
        assert payload["success"] is True
        assert payload["cached"] is False
        assert payload["resultCount"] == 3
        assert payload["results"][1]["displayUrl"] == "realpython.com"
        assert payload["results"][0]["type"] == "web_result"

    def test_blank_query_exits_with_error(self, gateway: SearchGateway, capsys):
        exit_code = cli.run_single_search("   ", gateway=gateway)

        assert exit_code == 1
        assert "Query is required" in capsys.readouterr().err

    def test_upstream_failure_exits_with_error(self, capsys):
        gateway = SearchGateway(
            config=Settings(),
            transport=FakeUpstream(httpx.ConnectError("Connection refused")).transport,
        )
        exit_code = cli.run_single_search("python", gateway=gateway)

        assert exit_code == 1
        assert "Search failed: Connection refused" in capsys.readouterr().err

    def test_no_results_message(self, capsys):
        gateway = SearchGateway(
            config=Settings(),
            transport=FakeUpstream("<html><body></body></html>").transport,
        )
        cli.run_single_search("zzqxj", gateway=gateway)
        assert "No results found." in capsys.readouterr().out


class TestInteractive:
    """REPL commands."""

    def test_repl_searches_then_quits(self, gateway: SearchGateway, monkeypatch, capsys):
        inputs = iter(["python asyncio", "python asyncio", "status", "clear", "quit"])
        monkeypatch.setattr("builtins.input", lambda prompt="": next(inputs))

        assert cli.run_interactive(max_results=3, gateway=gateway) == 0

        out = capsys.readouterr().out
        assert "(web)" in out
        assert "(cache)" in out
        assert '"cache_size": 1' in out
        assert "Cache cleared." in out
        assert len(gateway.cache) == 0

    def test_repl_exits_on_eof(self, gateway: SearchGateway, monkeypatch):
        def raise_eof(prompt=""):
            raise EOFError

        monkeypatch.setattr("builtins.input", raise_eof)
        assert cli.run_interactive(gateway=gateway) == 0


class TestMain:
    """Argument parsing."""

    def test_no_arguments_prints_help(self, capsys):
        assert cli.main([]) == 0
        assert "usage: websearch-gateway" in capsys.readouterr().out

    def test_non_positive_max_results_rejected(self):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["--max-results", "0", "python"])
        assert exc_info.value.code == 2

    def test_query_dispatches_to_single_search(self, monkeypatch):
        captured = {}

        def fake_run(query, max_results=None, output_format="pretty", gateway=None):
            captured.update(query=query, max_results=max_results, output_format=output_format)
            return 0

        monkeypatch.setattr(cli, "run_single_search", fake_run)

        assert cli.main(["-n", "7", "--format", "json", "rust borrow checker"]) == 0
        assert captured == {"query": "rust borrow checker", "max_results": 7, "output_format": "json"}

    def test_serve_dispatches_to_server(self, monkeypatch):
        captured = {}

        def fake_serve(host=None, port=None):
            captured.update(host=host, port=port)
            return 0

        monkeypatch.setattr(cli, "run_server", fake_serve)

        assert cli.main(["--serve", "--host", "0.0.0.0", "--port", "9001"]) == 0
        assert captured == {"host": "0.0.0.0", "port": 9001}
