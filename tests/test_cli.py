import json

import pytest
from typer.testing import CliRunner

from rochefort_sdk.cli.main import app
from rochefort_sdk.version import __version__

from .conftest import BASE_URL

runner = CliRunner()


@pytest.fixture(autouse=True)
def _store_env(monkeypatch):
    monkeypatch.setenv("ROCHEFORT_URL", BASE_URL)
    monkeypatch.delenv("ROCHEFORT_PROTOCOL", raising=False)


def _lines(output):
    return [json.loads(line) for line in output.splitlines() if line.strip()]


def test_version_and_env():
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert result.output.strip() == f"rochefort-sdk {__version__}"

    result = runner.invoke(app, ["--timeout", "4", "env"])
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["url"] == BASE_URL
    assert data["timeout"] == 4.0


def test_append_get_scan_search(fake_store):
    result = runner.invoke(app, ["append", "ns", "--tag", "a", "--alloc", "5"], input=b"abc")
    assert result.exit_code == 0, result.output
    assert json.loads(result.output) == {"offset": 0}

    result = runner.invoke(app, ["modify", "ns", "0", "1"], input=b"zxcv")
    assert result.exit_code == 0, result.output

    runner.invoke(app, ["append", "ns", "-t", "b"], input=b"second")

    result = runner.invoke(app, ["get", "ns", "0"])
    assert _lines(result.output) == [{"offset": 0, "data": "0x" + b"azxcv".hex()}]

    result = runner.invoke(app, ["scan", "ns"])
    assert [r["data"] for r in _lines(result.output)] == ["0x" + b"azxcv".hex(), "0x" + b"second".hex()]

    result = runner.invoke(app, ["search", "ns", "--tag", "b"])
    assert [r["data"] for r in _lines(result.output)] == ["0x" + b"second".hex()]

    result = runner.invoke(app, ["search", "ns", "--query", '{"or":[{"tag":"a"},{"tag":"b"}]}'])
    assert len(_lines(result.output)) == 2


def test_legacy_protocol(fake_store):
    result = runner.invoke(app, ["--protocol", "v1", "append", "", "--id", "k"], input=b"hello")
    assert result.exit_code == 0, result.output
    assert fake_store.requests[-1].url.params["id"] == "k"

    runner.invoke(app, ["--protocol", "v1", "append", ""], input=b"world")
    result = runner.invoke(app, ["--protocol", "v1", "get", "", "17", "0"])
    assert [r["data"] for r in _lines(result.output)] == ["0x" + b"world".hex(), "0x" + b"hello".hex()]

    result = runner.invoke(app, ["--protocol", "v1", "compact", "x"])
    assert result.exit_code == 2


def test_delete_needs_confirmation(fake_store):
    result = runner.invoke(app, ["delete", "ns"], input="n\n")
    assert result.exit_code != 0
    assert not fake_store.requests

    result = runner.invoke(app, ["delete", "ns", "--yes"])
    assert result.exit_code == 0
    assert json.loads(result.output) == {"namespace": "ns", "deleted": True}


def test_store_errors_exit_1(store_router):
    store_router.post("/get").respond(404, text="no such offset")
    result = runner.invoke(app, ["get", "ns", "99"])
    assert result.exit_code == 1
    assert "no such offset" in result.output


def test_search_needs_a_query():
    result = runner.invoke(app, ["search", "ns"])
    assert result.exit_code == 2
