import json

import pytest

from lcrealtime.core.MessageParser import MessageParser
from lcrealtime.core.Messages import Message, TextMessage, TypedMessage
from lcrealtime.core.Variants import BaseVariant, TextVariant, TypedVariant
from lcrealtime.shared.errors import InvalidVariantError


class LocationMessage(TypedMessage):
    message_type = 5


class ExplodingVariant:
    name = "exploding"

    def __init__(self):
        self.calls = 0

    def decode(self, payload):
        self.calls += 1
        return payload["msg"]["nested"]["missing"]

    def encode(self, message):
        return message.to_json()


class GreedyVariant:
    name = "greedy"

    def decode(self, payload):
        return Message({"greedy": payload})

    def encode(self, message):
        return message.to_json()


def test_builtins_are_tried_text_first():
    parser = MessageParser.with_builtins()

    names = [variant.name for variant in parser.variants]
    assert names == ["TextMessage", "TypedMessage", "Message"]


@pytest.mark.parametrize("message", [
    Message("plain text"),
    Message({"structured": [1, 2, 3]}),
    TypedMessage({"text": "typed", "attr": {"lat": 1.5}}),
    TextMessage("hello"),
])
def test_encoded_messages_decode_to_equivalent_instances(message):
    parser = MessageParser.with_builtins()

    decoded = parser.decode(parser.encode(message))

    assert type(decoded) is type(message)
    assert decoded.content == message.content


def test_decodes_deserialized_text_payload():
    parser = MessageParser.with_builtins()

    message = parser.decode({"_lctext": "hello", "_lcattrs": {}, "_lctype": -1})

    assert isinstance(message, TextMessage)
    assert message.content["text"] == "hello"


def test_decodes_bytes_and_non_json_text():
    parser = MessageParser.with_builtins()

    assert parser.decode(b'{"_lctext":"hi","_lcattrs":{},"_lctype":0}').text == "hi"
    plain = parser.decode("not json at all")
    assert type(plain) is Message and plain.content == "not json at all"


def test_missing_attrs_default_to_empty():
    message = MessageParser.with_builtins().decode({"_lctext": "x", "_lctype": 0})

    assert message.attr == {}


def test_legacy_text_envelope():
    parser = MessageParser.with_builtins()

    message = parser.decode({
        "cid": "551a2847e4b04d688ee00bb6",
        "fromPeerId": "bob",
        "timestamp": 1428983914000,
        "msg": {"type": "text", "text": "legacy hello"},
    })

    assert isinstance(message, TextMessage)
    assert message.text == "legacy hello"
    assert message.type == -1
    assert message.from_ == "bob"
    assert message.timestamp == 1428983914000


def test_unknown_shapes_decode_to_nothing():
    parser = MessageParser.with_builtins()

    assert parser.decode({"_lctext": "?", "_lcattrs": {}, "_lctype": 99}) is None
    assert parser.decode({"msg": {"type": "image", "url": "x"}}) is None
    assert parser.decode(None) is None
    assert parser.decode("null") is None


def test_empty_registry_matches_nothing():
    assert MessageParser().decode("hello") is None


def test_later_registration_takes_priority():
    parser = MessageParser.with_builtins()
    parser.register(GreedyVariant())

    message = parser.decode({"_lctext": "hi", "_lcattrs": {}, "_lctype": -1})

    assert type(message) is Message
    assert message.content["greedy"]["_lctext"] == "hi"


def test_custom_typed_variant_extends_codec():
    parser = MessageParser.with_builtins()
    parser.register(TypedVariant(LocationMessage))

    wire = parser.encode(LocationMessage({"text": "here", "attr": {"lat": 31.2}}))
    decoded = parser.decode(wire)

    assert json.loads(wire)["_lctype"] == 5
    assert isinstance(decoded, LocationMessage)
    assert decoded.attr == {"lat": 31.2}


def test_custom_tag_unregistered_is_dropped():
    wire = LocationMessage({"text": "here"}).to_json()

    assert MessageParser.with_builtins().decode(wire) is None


def test_faulting_variant_does_not_block_the_rest():
    parser = MessageParser.with_builtins()
    exploding = parser.register(ExplodingVariant())

    message = parser.decode('{"_lctext":"hi","_lcattrs":{},"_lctype":-1}')

    assert exploding.calls == 1
    assert isinstance(message, TextMessage)


def test_only_faulting_variants_yield_nothing():
    parser = MessageParser()
    parser.register(ExplodingVariant())
    parser.register(ExplodingVariant())

    assert parser.decode({"msg": {}}) is None


@pytest.mark.parametrize("candidate", [
    None,
    object(),
    type("DecodeOnly", (), {"decode": lambda self, p: None})(),
    type("EncodeOnly", (), {"encode": lambda self, m: ""})(),
    type("NotCallable", (), {"decode": 1, "encode": 2})(),
])
def test_register_rejects_incomplete_variants(candidate):
    parser = MessageParser()

    with pytest.raises(InvalidVariantError):
        parser.register(candidate)
    assert len(parser) == 0


def test_invalid_variant_error_is_a_type_error():
    with pytest.raises(TypeError):
        MessageParser().register(object())


def test_encode_falls_back_to_message_serialization():
    parser = MessageParser()

    assert parser.encode(TextMessage("x")) == TextMessage("x").to_json()


def test_builtin_variant_reprs():
    assert "TextMessage" in repr(TextVariant())
    assert "Message" in repr(BaseVariant())


def test_invalid_utf8_bytes_decode_to_nothing():
    parser = MessageParser.with_builtins()

    assert parser.decode(b"\xff\xfe") is None


def test_json_nested_too_deeply_decodes_to_nothing():
    parser = MessageParser.with_builtins()

    assert parser.decode("[" * 100000) is None
