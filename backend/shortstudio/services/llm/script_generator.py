"""
Generator skryptów wideo (LLM, chat completion).
Odpowiedź to wolny tekst: linia `TITLE:` i bloki `[mm:ss] [wizualizacja]` + narracja.
"""

from dataclasses import dataclass

import httpx
import openai
import structlog
from openai import AsyncOpenAI

from shortstudio.core.config import get_settings
from shortstudio.core.exceptions import TransportError, UpstreamError
from shortstudio.services.providers.base import CredentialLookup, ProviderAdapter, Result
from shortstudio.services.scripts.parser import extract_title

settings = get_settings()
logger = structlog.get_logger()

SYSTEM_PROMPT = (
    "You are a professional video script writer specializing in vertical short-form content."
)

PLATFORM_LABELS = {
    "youtube": "YouTube Shorts",
    "tiktok": "TikTok",
    "both": "YouTube Shorts and TikTok",
}

USER_PROMPT_TEMPLATE = """Create a script for a vertical short video about {topic} for {platform}.

Additional instructions:
{instructions}

The script should be engaging, concise, and optimized for {platform}.
Include timestamps and visual directions in [brackets].

Format:
TITLE: [Video Title]

[00:00] [Visual description]
Narration text

[00:05] [Visual description]
Narration text

...and so on."""


@dataclass(frozen=True)
class GeneratedScript:
    title: str
    content: str
    model_id: str
    prompt: str


def build_user_prompt(topic: str, platform: str, instructions: str = "") -> str:
    label = PLATFORM_LABELS.get(platform, platform)
    return USER_PROMPT_TEMPLATE.format(
        topic=topic,
        platform=label,
        instructions=instructions.strip() or "-",
    )


def _upstream_message(exc: openai.APIStatusError) -> str:
    body = exc.body
    if isinstance(body, dict):
        message = body.get("message")
        if isinstance(message, str) and message.strip():
            return message.strip()
    return exc.message or f"openai request failed (HTTP {exc.status_code})"


class ScriptGenerator(ProviderAdapter):
    provider = "openai"
    base_url = settings.OPENAI_BASE_URL

    def __init__(self, http_client: httpx.AsyncClient | None = None, model: str | None = None, **kwargs):
        super().__init__(http_client=http_client, **kwargs)
        self.model = model or settings.OPENAI_MODEL

    async def generate(
        self,
        credentials: CredentialLookup,
        topic: str,
        platform: str,
        instructions: str = "",
    ) -> Result[GeneratedScript]:
        key = await self._credential(credentials)
        if not key.ok:
            return Result.failure(key.error)

        user_prompt = build_user_prompt(topic, platform, instructions)
        logger.info("Generowanie skryptu LLM", topic=topic, platform=platform, model=self.model)

        # max_retries=0: dokładnie jedna próba, ponowienia są decyzją wywołującego
        client = AsyncOpenAI(
            api_key=key.value,
            base_url=self.base_url,
            max_retries=0,
            timeout=settings.PROVIDER_TIMEOUT_SECONDS,
            http_client=self._http_client,
        )
        try:
            response = await client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": user_prompt},
                ],
                max_tokens=settings.OPENAI_MAX_TOKENS,
                temperature=settings.OPENAI_TEMPERATURE,
            )
        except openai.APIStatusError as exc:
            message = _upstream_message(exc)
            logger.warning("LLM zwrócił błąd", status_code=exc.status_code, error=message)
            return Result.failure(UpstreamError(message, provider=self.provider, status_code=exc.status_code))
        except openai.APIConnectionError as exc:
            logger.warning("LLM niedostępny", error=str(exc))
            return Result.failure(TransportError(f"openai: {exc}", provider=self.provider))
        finally:
            if self._http_client is None:
                await client.close()

        content = (response.choices[0].message.content or "").strip() if response.choices else ""
        if not content:
            return Result.failure(UpstreamError("Model zwrócił pustą odpowiedź", provider=self.provider))

        title = extract_title(content, fallback=f"{topic} Video")
        logger.info("Skrypt wygenerowany", title=title, length=len(content))

        return Result.success(
            GeneratedScript(
                title=title,
                content=content,
                model_id=response.model or self.model,
                prompt=instructions,
            )
        )
