import json

from typer.testing import CliRunner

from lcrealtime.client.cli import app

runner = CliRunner()


def test_decode_text_payload():
    result = runner.invoke(app, ["decode", '{"_lctext":"hello","_lcattrs":{},"_lctype":-1}'])

    assert result.exit_code == 0
    assert "TextMessage" in result.output
    assert "hello" in result.output


def test_decode_from_file(tmp_path):
    path = tmp_path / "payload.json"
    path.write_text('{"msg": {"type": "text", "text": "legacy"}, "fromPeerId": "bob"}', encoding="utf-8")

    result = runner.invoke(app, ["decode", "--file", str(path)])

    assert result.exit_code == 0
    assert "legacy" in result.output
    assert "bob" in result.output


def test_decode_no_match_exits_nonzero():
    result = runner.invoke(app, ["decode", '{"_lctype": 99}'])

    assert result.exit_code == 1
    assert "No variant matched" in result.output


def test_encode_text_with_attrs():
    result = runner.invoke(app, ["encode", "hi", "--attr", "lang=en"])

    assert result.exit_code == 0
    assert json.loads(result.output) == {"_lctext": "hi", "_lcattrs": {"lang": "en"}, "_lctype": -1}


def test_encode_plain_and_bad_kind():
    assert json.loads(runner.invoke(app, ["encode", "hi", "--kind", "plain"]).output) == "hi"
    assert runner.invoke(app, ["encode", "hi", "--kind", "video"]).exit_code == 2
