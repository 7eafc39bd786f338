"""Training command parsing and forwarding.

Users teach the bot new replies with::

    #ask <trigger> #ans <reply1>,<reply2>,...

The command is turned into a TrainingRecord and sent to the reply
service's ``botTraining`` cloud function.
"""

import logfire
from pydantic import ValidationError

from src.constants import (
    BOT_COMMAND_PREFIX,
    BOT_COMMAND_TEXT,
    CLOUD_FUNCTION_TRAINING,
    MIN_COMMAND_LENGTH,
    TRAINING_ANSWER_SENTINEL,
    TRAINING_COMMAND_PREFIX,
    TRAINING_FAILED_TEXT,
    TRAINING_SUCCESS_TEXT,
)
from src.models.reply_models import TrainingRecord
from src.services.reply_service import ReplyServiceClient, get_reply_service_client


class TrainingCommandError(ValueError):
    """Raised when a training command is malformed."""

    pass


def parse_training_command(text: str) -> TrainingRecord:
    """Parse ``#ask <trigger> #ans <r1,r2,...>`` into a TrainingRecord.

    Raises:
        TrainingCommandError: If the prefix or the ``#ans`` sentinel is
            missing, or the trigger or reply list is empty.
    """
    prefix = TRAINING_COMMAND_PREFIX + " "
    if not text.startswith(prefix):
        raise TrainingCommandError(f"Training command must start with '{prefix}'")

    body = text[len(prefix):]
    trigger, sep, answers = body.partition(TRAINING_ANSWER_SENTINEL)
    if not sep:
        raise TrainingCommandError(
            f"Training command is missing the '{TRAINING_ANSWER_SENTINEL.strip()}' sentinel"
        )

    trigger = trigger.strip()
    replies = [reply.strip() for reply in answers.split(",") if reply.strip()]
    if not trigger:
        raise TrainingCommandError("Training command has an empty trigger")
    if not replies:
        raise TrainingCommandError("Training command has no replies")

    try:
        return TrainingRecord(msg=trigger, reply_msg=replies)
    except ValidationError as e:
        raise TrainingCommandError(str(e)) from e


def is_bot_command(text: str) -> bool:
    return len(text) >= MIN_COMMAND_LENGTH and text.startswith(BOT_COMMAND_PREFIX)


def is_training_command(text: str) -> bool:
    return len(text) >= MIN_COMMAND_LENGTH and text.startswith(TRAINING_COMMAND_PREFIX)


class TrainingRelay:
    """Handle text commands addressed to the bot itself."""

    def __init__(self, reply_client: ReplyServiceClient | None = None):
        self._reply_client = reply_client

    def _get_reply_client(self) -> ReplyServiceClient:
        if self._reply_client is None:
            self._reply_client = get_reply_service_client()
        return self._reply_client

    async def train(self, record: TrainingRecord) -> str | None:
        """Forward a training record; returns the service reply or None on failure."""
        logfire.info(
            "Forwarding training record",
            trigger=record.msg,
            reply_count=len(record.reply_msg),
        )
        return await self._get_reply_client().call_function(
            CLOUD_FUNCTION_TRAINING, record.to_request()
        )

    async def process_command(self, text: str) -> str:
        """Run ``text`` as a command and return the reply to send.

        Text that is not a command is returned unchanged, which tells the
        caller that no command handled it.
        """
        if is_training_command(text):
            try:
                record = parse_training_command(text)
            except TrainingCommandError as e:
                logfire.warn("Rejected training command", error=str(e))
                return TRAINING_FAILED_TEXT

            result = await self.train(record)
            return TRAINING_SUCCESS_TEXT if result else TRAINING_FAILED_TEXT

        if is_bot_command(text):
            return BOT_COMMAND_TEXT

        return text
