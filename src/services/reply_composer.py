"""Builders for outgoing Send API messages.

Every function takes the recipient PSID (plus kind-specific parameters)
and returns an OutboundMessage ready for the Send Gateway. Nothing here
performs I/O.
"""

import random

from src.constants import (
    DEFAULT_QUIZ_ID,
    DEFAULT_QUIZ_OPTION_COUNT,
    DEFAULT_TEXT_METADATA,
    DEMO_ASSET_BASE_URL,
    DEMO_AUDIO_PATH,
    DEMO_FILE_PATH,
    DEMO_GIF_PATH,
    DEMO_IMAGE_PATH,
    DEMO_VIDEO_PATH,
    HELP_PROMPT_TEXT,
    HELP_SEND_TITLE,
    HELP_TEACH_TITLE,
    QUIZ_PAYLOAD_PREFIX,
)
from src.models.outbound import (
    OutboundAttachment,
    OutboundBody,
    OutboundMessage,
    QuickReplyOption,
    Recipient,
    SenderAction,
)


def _recipient(recipient_id: str) -> Recipient:
    if not recipient_id:
        raise ValueError("recipient_id is required")
    return Recipient(id=recipient_id)


def _attachment_message(
    recipient_id: str, attachment_type: str, payload: dict
) -> OutboundMessage:
    return OutboundMessage(
        recipient=_recipient(recipient_id),
        message=OutboundBody(
            attachment=OutboundAttachment(type=attachment_type, payload=payload)
        ),
    )


def _sender_action(recipient_id: str, action: SenderAction) -> OutboundMessage:
    return OutboundMessage(recipient=_recipient(recipient_id), sender_action=action)


# =============================================================================
# Text
# =============================================================================


def text_message(
    recipient_id: str,
    text: str,
    metadata: str = DEFAULT_TEXT_METADATA,
) -> OutboundMessage:
    """Plain text message."""
    return OutboundMessage(
        recipient=_recipient(recipient_id),
        message=OutboundBody(text=text, metadata=metadata),
    )


# =============================================================================
# Media attachments
# =============================================================================


def image_message(recipient_id: str, base_url: str = DEMO_ASSET_BASE_URL) -> OutboundMessage:
    return _attachment_message(recipient_id, "image", {"url": base_url + DEMO_IMAGE_PATH})


def gif_message(recipient_id: str, base_url: str = DEMO_ASSET_BASE_URL) -> OutboundMessage:
    # GIFs are sent as image attachments
    return _attachment_message(recipient_id, "image", {"url": base_url + DEMO_GIF_PATH})


def audio_message(recipient_id: str, base_url: str = DEMO_ASSET_BASE_URL) -> OutboundMessage:
    return _attachment_message(recipient_id, "audio", {"url": base_url + DEMO_AUDIO_PATH})


def video_message(recipient_id: str, base_url: str = DEMO_ASSET_BASE_URL) -> OutboundMessage:
    return _attachment_message(recipient_id, "video", {"url": base_url + DEMO_VIDEO_PATH})


def file_message(recipient_id: str, base_url: str = DEMO_ASSET_BASE_URL) -> OutboundMessage:
    return _attachment_message(recipient_id, "file", {"url": base_url + DEMO_FILE_PATH})


# =============================================================================
# Templates
# =============================================================================

_DEMO_BUTTONS = [
    {
        "type": "web_url",
        "url": "https://www.oculus.com/en-us/rift/",
        "title": "Open Web URL",
    },
    {
        "type": "postback",
        "title": "Trigger Postback",
        "payload": "DEVELOPED_DEFINED_PAYLOAD",
    },
    {
        "type": "phone_number",
        "title": "Call Phone Number",
        "payload": "+16505551234",
    },
]


def _button_template(recipient_id: str, text: str) -> OutboundMessage:
    return _attachment_message(
        recipient_id,
        "template",
        {
            "template_type": "button",
            "text": text,
            "buttons": [dict(button) for button in _DEMO_BUTTONS],
        },
    )


def button_message(recipient_id: str) -> OutboundMessage:
    """Button template with a URL, a postback and a call button."""
    return _button_template(recipient_id, "This is test text")


def menu_message(recipient_id: str) -> OutboundMessage:
    """The #menu reply: the demo button set under a "Menu" heading."""
    return _button_template(recipient_id, "Menu")


def generic_message(recipient_id: str, base_url: str = DEMO_ASSET_BASE_URL) -> OutboundMessage:
    """Two-card generic template carousel."""
    elements = [
        {
            "title": "rift",
            "subtitle": "Next-generation virtual reality",
            "item_url": "https://www.oculus.com/en-us/rift/",
            "image_url": base_url + DEMO_IMAGE_PATH,
            "buttons": [
                {
                    "type": "web_url",
                    "url": "https://www.oculus.com/en-us/rift/",
                    "title": "Open Web URL",
                },
                {
                    "type": "postback",
                    "title": "Call Postback",
                    "payload": "Payload for first bubble",
                },
            ],
        },
        {
            "title": "touch",
            "subtitle": "Your Hands, Now in VR",
            "item_url": "https://www.oculus.com/en-us/touch/",
            "image_url": base_url + "/img/touch.png",
            "buttons": [
                {
                    "type": "web_url",
                    "url": "https://www.oculus.com/en-us/touch/",
                    "title": "Open Web URL",
                },
                {
                    "type": "postback",
                    "title": "Call Postback",
                    "payload": "Payload for second bubble",
                },
            ],
        },
    ]
    return _attachment_message(
        recipient_id,
        "template",
        {"template_type": "generic", "elements": elements},
    )


def receipt_message(recipient_id: str, base_url: str = DEMO_ASSET_BASE_URL) -> OutboundMessage:
    """Demo order receipt; the Send API requires a unique order number."""
    order_number = f"order{random.randrange(1000)}"
    payload = {
        "template_type": "receipt",
        "recipient_name": "Peter Chang",
        "order_number": order_number,
        "currency": "USD",
        "payment_method": "Visa 1234",
        "timestamp": "1428444852",
        "elements": [
            {
                "title": "Oculus Rift",
                "subtitle": "Includes: headset, sensor, remote",
                "quantity": 1,
                "price": 599.00,
                "currency": "USD",
                "image_url": base_url + "/img/riftsq.png",
            },
            {
                "title": "Samsung Gear VR",
                "subtitle": "Frost White",
                "quantity": 1,
                "price": 99.99,
                "currency": "USD",
                "image_url": base_url + "/img/gearvrsq.png",
            },
        ],
        "address": {
            "street_1": "1 Hacker Way",
            "street_2": "",
            "city": "Menlo Park",
            "postal_code": "94025",
            "state": "CA",
            "country": "US",
        },
        "summary": {
            "subtotal": 698.99,
            "shipping_cost": 20.00,
            "total_tax": 57.67,
            "total_cost": 626.66,
        },
        "adjustments": [
            {"name": "New Customer Discount", "amount": -50},
            {"name": "$100 Off Coupon", "amount": -100},
        ],
    }
    return _attachment_message(recipient_id, "template", payload)


# =============================================================================
# Quick replies
# =============================================================================


def quick_reply_message(recipient_id: str) -> OutboundMessage:
    """Ask for a favorite movie genre with three quick replies."""
    genres = ["Action", "Comedy", "Drama"]
    return OutboundMessage(
        recipient=_recipient(recipient_id),
        message=OutboundBody(
            text="What's your favorite movie genre?",
            metadata=DEFAULT_TEXT_METADATA,
            quick_replies=[
                QuickReplyOption(
                    title=genre,
                    payload=f"DEVELOPER_DEFINED_PAYLOAD_FOR_PICKING_{genre.upper()}",
                )
                for genre in genres
            ],
        ),
    )


def quiz_payload(quiz_id: str, choice: str) -> str:
    """Opaque quick-reply payload identifying a quiz and the chosen option."""
    return f"{QUIZ_PAYLOAD_PREFIX}:{quiz_id}:{choice}"


def parse_quiz_payload(payload: str) -> tuple[str, str] | None:
    """Return (quiz_id, choice) for a quiz payload, None for anything else."""
    prefix, sep, rest = payload.partition(":")
    if prefix != QUIZ_PAYLOAD_PREFIX or not sep:
        return None
    quiz_id, sep, choice = rest.rpartition(":")
    if not sep or not quiz_id or not choice:
        return None
    return quiz_id, choice


def quiz_message(
    recipient_id: str,
    text: str,
    quiz_id: str = DEFAULT_QUIZ_ID,
    option_count: int = DEFAULT_QUIZ_OPTION_COUNT,
) -> OutboundMessage:
    """Numbered multiple-choice quiz.

    Each option's payload names the quiz and the option, never the correct
    answer; scoring looks the answer up by quiz id.
    """
    if option_count < 1:
        raise ValueError("option_count must be positive")
    return OutboundMessage(
        recipient=_recipient(recipient_id),
        message=OutboundBody(
            text=text,
            metadata=quiz_id,
            quick_replies=[
                QuickReplyOption(title=str(n), payload=quiz_payload(quiz_id, str(n)))
                for n in range(1, option_count + 1)
            ],
        ),
    )


def help_message(recipient_id: str) -> OutboundMessage:
    """The #help reply: how to talk to the bot."""
    return OutboundMessage(
        recipient=_recipient(recipient_id),
        message=OutboundBody(
            text=HELP_PROMPT_TEXT,
            metadata=DEFAULT_TEXT_METADATA,
            quick_replies=[
                QuickReplyOption(
                    title=HELP_TEACH_TITLE,
                    payload="DEVELOPER_DEFINED_PAYLOAD_FOR_PICKING_ACTION",
                ),
                QuickReplyOption(
                    title=HELP_SEND_TITLE,
                    payload="DEVELOPER_DEFINED_PAYLOAD_FOR_PICKING_ACTION",
                ),
            ],
        ),
    )


# =============================================================================
# Sender actions
# =============================================================================


def read_receipt(recipient_id: str) -> OutboundMessage:
    return _sender_action(recipient_id, SenderAction.MARK_SEEN)


def typing_on(recipient_id: str) -> OutboundMessage:
    return _sender_action(recipient_id, SenderAction.TYPING_ON)


def typing_off(recipient_id: str) -> OutboundMessage:
    return _sender_action(recipient_id, SenderAction.TYPING_OFF)
