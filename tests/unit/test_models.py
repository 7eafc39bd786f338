"""Tests for webhook, outbound and reply-service models."""

import json

import pytest
from hypothesis import given, strategies as st
from pydantic import ValidationError

from src.models.messenger import (
    DeliveryEvent,
    Entry,
    InboundEnvelope,
    MessageEvent,
    OptinEvent,
    PostbackEvent,
    ReadEvent,
    event_kind,
    messaging_event_adapter,
)
from src.models.outbound import (
    OutboundAttachment,
    OutboundBody,
    OutboundMessage,
    Recipient,
    SenderAction,
)
from src.models.reply_models import CloudFunctionResponse, TrainingRecord

BASE_EVENT = {
    "sender": {"id": "user-1"},
    "recipient": {"id": "page-1"},
    "timestamp": 1458692752478,
}


class TestMessagingEventUnion:
    """Test discriminated decoding of messaging events."""

    @pytest.mark.parametrize(
        "variant,expected_type",
        [
            ({"optin": {"ref": "PASS_THROUGH"}}, OptinEvent),
            ({"message": {"mid": "mid.1", "text": "hello"}}, MessageEvent),
            ({"delivery": {"mids": ["mid.1"], "watermark": 1, "seq": 37}}, DeliveryEvent),
            ({"postback": {"payload": "USER_DEFINED_PAYLOAD"}}, PostbackEvent),
            ({"read": {"watermark": 1458668856253, "seq": 38}}, ReadEvent),
        ],
    )
    def test_each_variant_decodes(self, variant, expected_type):
        event = messaging_event_adapter.validate_python({**BASE_EVENT, **variant})
        assert isinstance(event, expected_type)
        assert event.sender.id == "user-1"

    def test_no_variant_rejected(self):
        with pytest.raises(ValidationError):
            messaging_event_adapter.validate_python(dict(BASE_EVENT))

    def test_multiple_variants_rejected(self):
        raw = {**BASE_EVENT, "message": {"text": "hi"}, "postback": {"payload": "X"}}
        with pytest.raises(ValidationError):
            messaging_event_adapter.validate_python(raw)

    def test_null_variant_ignored(self):
        """A variant key explicitly set to null does not count as present."""
        raw = {**BASE_EVENT, "message": {"text": "hi"}, "postback": None}
        assert isinstance(messaging_event_adapter.validate_python(raw), MessageEvent)

    def test_numeric_ids_coerced(self):
        raw = {
            "sender": {"id": 1234567890},
            "recipient": {"id": 987654321},
            "message": {"text": "hi", "app_id": 1517776481860111},
        }
        event = messaging_event_adapter.validate_python(raw)
        assert event.sender.id == "1234567890"
        assert event.message.app_id == "1517776481860111"

    def test_message_defaults(self):
        event = messaging_event_adapter.validate_python({**BASE_EVENT, "message": {}})
        assert event.message.is_echo is False
        assert event.message.attachments == []
        assert event.message.quick_reply is None

    def test_quick_reply_decoded(self):
        raw = {
            **BASE_EVENT,
            "message": {"text": "Action", "quick_reply": {"payload": "PICK_ACTION"}},
        }
        event = messaging_event_adapter.validate_python(raw)
        assert event.message.quick_reply.payload == "PICK_ACTION"

    def test_event_kind(self):
        assert event_kind({"read": {}}) == "read"
        assert event_kind({}) is None
        assert event_kind({"read": {}, "optin": {}}) is None


class TestEnvelope:
    def test_envelope_with_messaging_and_changes(self):
        envelope = InboundEnvelope.model_validate(
            {
                "object": "page",
                "entry": [
                    {
                        "id": "page-1",
                        "time": 1,
                        "messaging": [{**BASE_EVENT, "message": {"text": "hi"}}],
                        "changes": [
                            {
                                "field": "feed",
                                "value": {
                                    "item": "comment",
                                    "message": "nice",
                                    "comment_id": "c1",
                                    "reaction_type": "like",
                                },
                            }
                        ],
                    }
                ],
            }
        )
        entry = envelope.entry[0]
        assert len(entry.messaging) == 1
        assert entry.changes[0].value.item == "comment"

    def test_envelope_defaults(self):
        envelope = InboundEnvelope.model_validate({"object": "user"})
        assert envelope.entry == []

    def test_envelope_requires_object(self):
        with pytest.raises(ValidationError):
            InboundEnvelope.model_validate({"entry": []})

    @given(
        entry_id=st.text(min_size=1, max_size=100),
        time=st.integers(min_value=0),
    )
    def test_entry_properties(self, entry_id: str, time: int):
        """Property: Entry should accept any id and non-negative time."""
        entry = Entry(id=entry_id, time=time)
        assert entry.id == entry_id
        assert entry.time == time
        assert entry.messaging == []
        assert entry.changes == []


class TestOutboundMessage:
    def test_text_payload(self):
        message = OutboundMessage(
            recipient=Recipient(id="user-1"),
            message=OutboundBody(text="hi", metadata="META"),
        )
        assert message.to_payload() == {
            "recipient": {"id": "user-1"},
            "message": {"text": "hi", "metadata": "META"},
        }

    def test_sender_action_payload(self):
        message = OutboundMessage(
            recipient=Recipient(id="user-1"), sender_action=SenderAction.TYPING_ON
        )
        assert message.to_payload() == {
            "recipient": {"id": "user-1"},
            "sender_action": "typing_on",
        }

    def test_message_and_action_rejected(self):
        with pytest.raises(ValidationError):
            OutboundMessage(
                recipient=Recipient(id="user-1"),
                message=OutboundBody(text="hi"),
                sender_action=SenderAction.MARK_SEEN,
            )

    def test_neither_message_nor_action_rejected(self):
        with pytest.raises(ValidationError):
            OutboundMessage(recipient=Recipient(id="user-1"))

    def test_body_needs_text_or_attachment(self):
        with pytest.raises(ValidationError):
            OutboundBody()
        with pytest.raises(ValidationError):
            OutboundBody(
                text="hi",
                attachment=OutboundAttachment(type="image", payload={"url": "x"}),
            )

    def test_empty_recipient_rejected(self):
        with pytest.raises(ValidationError):
            Recipient(id="")


class TestReplyModels:
    def test_training_record_serializes_with_alias(self):
        record = TrainingRecord(msg="hello", reply_msg=["hi", "hey"])
        body = json.loads(json.dumps(record.to_request()))
        assert body == {"msg": "hello", "replyMsg": ["hi", "hey"]}

    def test_training_record_accepts_alias(self):
        record = TrainingRecord.model_validate({"msg": "a", "replyMsg": ["b"]})
        assert record.reply_msg == ["b"]

    def test_training_record_needs_replies(self):
        with pytest.raises(ValidationError):
            TrainingRecord(msg="hello", reply_msg=[])

    def test_cloud_function_response(self):
        response = CloudFunctionResponse.model_validate(
            {"result": {"msg": "hello", "replyMsg": "hi"}}
        )
        assert response.result.reply_msg == "hi"
