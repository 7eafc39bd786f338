"""Tests for outbound message builders."""

import re

import pytest

from src.constants import DEMO_ASSET_BASE_URL
from src.models.outbound import SenderAction
from src.services import reply_composer


class TestTextAndMedia:
    def test_text_message(self):
        payload = reply_composer.text_message("user-1", "hello").to_payload()
        assert payload == {
            "recipient": {"id": "user-1"},
            "message": {"text": "hello", "metadata": "DEVELOPER_DEFINED_METADATA"},
        }

    @pytest.mark.parametrize(
        "builder,attachment_type,path",
        [
            (reply_composer.image_message, "image", "/img/rift.png"),
            (reply_composer.gif_message, "image", "/img/instagram_logo.gif"),
            (reply_composer.audio_message, "audio", "/audio/sample.mp3"),
            (reply_composer.video_message, "video", "/video/allofus480.mov"),
            (reply_composer.file_message, "file", "/files/test.txt"),
        ],
    )
    def test_media_attachments(self, builder, attachment_type, path):
        attachment = builder("user-1").to_payload()["message"]["attachment"]
        assert attachment["type"] == attachment_type
        assert attachment["payload"]["url"] == DEMO_ASSET_BASE_URL + path

    def test_media_base_url_override(self):
        message = reply_composer.image_message("user-1", "https://cdn.example.com")
        assert message.message.attachment.payload["url"] == "https://cdn.example.com/img/rift.png"

    def test_empty_recipient_rejected(self):
        with pytest.raises(ValueError):
            reply_composer.text_message("", "hello")


class TestTemplates:
    def test_button_template(self):
        payload = reply_composer.button_message("user-1").message.attachment.payload
        assert payload["template_type"] == "button"
        assert [b["type"] for b in payload["buttons"]] == [
            "web_url",
            "postback",
            "phone_number",
        ]

    def test_menu_uses_button_template(self):
        payload = reply_composer.menu_message("user-1").message.attachment.payload
        assert payload["template_type"] == "button"
        assert payload["text"] == "Menu"
        assert len(payload["buttons"]) == 3

    def test_generic_template_has_two_cards(self):
        payload = reply_composer.generic_message("user-1").message.attachment.payload
        assert payload["template_type"] == "generic"
        assert [e["title"] for e in payload["elements"]] == ["rift", "touch"]
        assert all(len(e["buttons"]) == 2 for e in payload["elements"])

    def test_receipt_template(self):
        payload = reply_composer.receipt_message("user-1").message.attachment.payload
        assert payload["template_type"] == "receipt"
        assert re.fullmatch(r"order\d{1,3}", payload["order_number"])
        assert len(payload["elements"]) == 2
        assert payload["summary"]["total_cost"] == 626.66


class TestQuickReplies:
    def test_genre_quick_replies(self):
        body = reply_composer.quick_reply_message("user-1").message
        assert body.text == "What's your favorite movie genre?"
        assert [q.title for q in body.quick_replies] == ["Action", "Comedy", "Drama"]
        assert body.quick_replies[0].payload == "DEVELOPER_DEFINED_PAYLOAD_FOR_PICKING_ACTION"

    def test_quiz_options_carry_opaque_tokens(self):
        body = reply_composer.quiz_message("user-1", "Pick one", quiz_id="q7").message
        assert [q.title for q in body.quick_replies] == ["1", "2", "3", "4"]
        assert [q.payload for q in body.quick_replies] == [
            "QUIZ:q7:1",
            "QUIZ:q7:2",
            "QUIZ:q7:3",
            "QUIZ:q7:4",
        ]

    def test_quiz_option_count(self):
        body = reply_composer.quiz_message("user-1", "Pick", option_count=2).message
        assert len(body.quick_replies) == 2

    def test_quiz_option_count_must_be_positive(self):
        with pytest.raises(ValueError):
            reply_composer.quiz_message("user-1", "Pick", option_count=0)

    @pytest.mark.parametrize(
        "payload,expected",
        [
            ("QUIZ:demo:2", ("demo", "2")),
            ("QUIZ:a:b:3", ("a:b", "3")),
            ("QUIZ:demo", None),
            ("QUIZ::2", None),
            ("DEVELOPER_DEFINED_PAYLOAD_FOR_PICKING_ACTION", None),
            ("2", None),
        ],
    )
    def test_parse_quiz_payload(self, payload, expected):
        assert reply_composer.parse_quiz_payload(payload) == expected

    def test_help_message(self):
        body = reply_composer.help_message("user-1").message
        assert len(body.quick_replies) == 2


class TestSenderActions:
    @pytest.mark.parametrize(
        "builder,action",
        [
            (reply_composer.read_receipt, SenderAction.MARK_SEEN),
            (reply_composer.typing_on, SenderAction.TYPING_ON),
            (reply_composer.typing_off, SenderAction.TYPING_OFF),
        ],
    )
    def test_sender_actions(self, builder, action):
        message = builder("user-1")
        assert message.sender_action is action
        assert "message" not in message.to_payload()
