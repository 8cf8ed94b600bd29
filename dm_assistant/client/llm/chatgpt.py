import base64
import os

from openai import OpenAI

OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "your-default-api-key")
OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL") or None
MODEL = os.getenv("MODEL", "gpt-4o-mini")
CLASSIFIER_MODEL = os.getenv("CLASSIFIER_MODEL", MODEL)

client = OpenAI(api_key=OPENAI_API_KEY, base_url=OPENAI_BASE_URL)

TRANSCRIBE_INSTRUCTION = (
    "Transcribe ALL of the text in this document exactly as written. "
    "Do not summarize, shorten, translate or comment on it. "
    "Keep headings, lists and paragraph breaks. "
    "Return only the transcribed text."
)


def chat_completion(messages: list[dict], model: str | None = None, max_tokens: int | None = None) -> str:
    """
    Blocking chat-completion call. Callers run it through asyncio.to_thread.
    openai.APIStatusError propagates so callers can map upstream status codes.
    """
    kwargs = {}
    if max_tokens is not None:
        kwargs["max_tokens"] = max_tokens
    response = client.chat.completions.create(
        model=model or MODEL,
        messages=messages,
        **kwargs,
    )
    if not response.choices:
        return ""
    return response.choices[0].message.content or ""


def transcribe_document(data: bytes, filename: str, mime_type: str) -> str:
    encoded = base64.b64encode(data).decode("ascii")
    return chat_completion(
        [
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": TRANSCRIBE_INSTRUCTION},
                    {
                        "type": "file",
                        "file": {
                            "filename": filename,
                            "file_data": f"data:{mime_type};base64,{encoded}",
                        },
                    },
                ],
            }
        ]
    )
