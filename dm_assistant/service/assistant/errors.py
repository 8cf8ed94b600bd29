from dm_assistant.model.assistant.assistant_response import AssistantErrorResponse


class AssistantError(Exception):
    """A conversation failure that still carries a reply the vendor can relay."""

    def __init__(
        self,
        status_code: int,
        error: str,
        reply: str,
        question_count: int = 0,
        intent: str | None = None,
    ):
        super().__init__(error)
        self.status_code = status_code
        self.error = error
        self.reply = reply
        self.question_count = question_count
        self.intent = intent

    def to_response(self) -> AssistantErrorResponse:
        return AssistantErrorResponse(
            error=self.error,
            reply=self.reply,
            message=self.reply,
            question_count=self.question_count,
            tracking_link=None,
            should_reply=False,
            intent=self.intent,
        )
