from typing import Iterator, Optional

import config
from gemini_client import GeminiClient


def get_ai_client() -> Iterator[Optional[GeminiClient]]:
    """
    Per-request Gemini client. Yields None when GEMINI_API_KEY is unset so the
    generation layer can treat it like any other provider failure.
    """
    if not config.gemini_api_key():
        yield None
        return

    client = GeminiClient()
    try:
        yield client
    finally:
        client.close()
