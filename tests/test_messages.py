import json

import pytest

from lcrealtime.core.Messages import Message, TextMessage, TypedMessage, metadata_from
from lcrealtime.core.MessageTypes import MessageType, claims_reserved_shape


def test_message_defaults():
    message = Message("hello")

    assert message.content == "hello"
    assert isinstance(message.timestamp, int) and message.timestamp > 0
    assert message.from_ is None
    assert message.need_receipt is False
    assert message.transient is False


def test_message_serializes_content_verbatim():
    assert Message("hello").to_json() == '"hello"'
    assert json.loads(Message({"b": [1, 2], "a": None}).to_json()) == {"a": None, "b": [1, 2]}
    assert Message("hello").to_json({"override": 1}) == '{"override":1}'


def test_send_options_follow_delivery_flags():
    message = Message("x", need_receipt=True, transient=True)

    assert message.send_options() == {"r": True, "transient": True}


def test_typed_message_forces_discriminator():
    message = TypedMessage({"text": "hi", "attr": {"k": "v"}, "type": 42})

    assert message.type == MessageType.TYPED
    assert json.loads(message.to_json()) == {"_lctext": "hi", "_lcattrs": {"k": "v"}, "_lctype": 0}


def test_text_message_from_string():
    message = TextMessage("hello")

    assert message.text == "hello"
    assert message.content["type"] == -1
    assert json.loads(message.to_json()) == {"_lctext": "hello", "_lcattrs": {}, "_lctype": -1}


def test_typed_wire_keeps_extra_data_but_not_overriding_reserved_fields():
    wire = TextMessage("hi").to_wire({"_lctype": 7, "extra": True})

    assert wire["_lctype"] == -1
    assert wire["extra"] is True


def test_metadata_from_envelope():
    meta = metadata_from({"fromPeerId": "bob", "timestamp": 1428983914000, "transient": 1})

    assert meta == {"from_": "bob", "timestamp": 1428983914000, "transient": True}
    assert metadata_from(None) == {}


def test_reserved_shapes():
    assert claims_reserved_shape({"_lctype": 3})
    assert claims_reserved_shape({"msg": {"type": "image"}})
    assert not claims_reserved_shape({"msg": "plain"})
    assert not claims_reserved_shape("text")


def test_messages_are_not_hashable():
    with pytest.raises(TypeError):
        hash(Message("x"))
    with pytest.raises(TypeError):
        {TextMessage("x")}
