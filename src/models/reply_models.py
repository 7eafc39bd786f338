"""Reply-service (Parse Server cloud code) request and response models."""

from pydantic import BaseModel, ConfigDict, Field


class TrainingRecord(BaseModel):
    """A trigger phrase and the replies the bot may answer it with."""

    model_config = ConfigDict(populate_by_name=True)

    msg: str = Field(..., min_length=1, description="Trigger phrase")
    reply_msg: list[str] = Field(
        ..., min_length=1, alias="replyMsg", description="Acceptable replies"
    )

    def to_request(self) -> dict:
        """Body for the botTraining cloud function."""
        return self.model_dump(by_alias=True)


class CloudFunctionResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    msg: str | None = None
    reply_msg: str | None = Field(default=None, alias="replyMsg")


class CloudFunctionResponse(BaseModel):
    """Response envelope of a cloud function call: ``{"result": {...}}``."""

    result: CloudFunctionResult
