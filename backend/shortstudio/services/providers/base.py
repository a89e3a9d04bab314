"""
Wspólny kontrakt adapterów dostawców zewnętrznych.

Każdy adapter:
  1. pobiera sekret dostawcy przez `CredentialLookup` (CredentialMissing gdy brak),
  2. wysyła jedno żądanie HTTP,
  3. odpowiedź spoza 2xx mapuje na UpstreamError z komunikatem dostawcy,
  4. błąd sieci / timeout mapuje na TransportError.
Wynik zawsze wraca jako `Result` — wyjątki dostawców nie wychodzą poza adapter.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

import httpx
import structlog
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from shortstudio.core.config import get_settings
from shortstudio.core.exceptions import ProviderError, TransportError, UpstreamError

settings = get_settings()
logger = structlog.get_logger()

T = TypeVar("T")

# Asynchroniczne wyszukanie sekretu: nazwa dostawcy → Result[str]
CredentialLookup = Callable[[str], Awaitable["Result[str]"]]


@dataclass(frozen=True)
class Result(Generic[T]):
    value: T | None = None
    error: ProviderError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: ProviderError) -> "Result[T]":
        return cls(error=error)

    def unwrap(self) -> T:
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]


def extract_error_message(response: httpx.Response, provider: str) -> str:
    """
    Komunikat błędu dostawcy, dosłownie, jeśli da się go wyciągnąć.
    Obsługiwane kształty: {"message"}, {"error": {"message"}}, {"error": "..."},
    {"detail": "..."} / {"detail": {"message"}}; w ostateczności treść odpowiedzi.
    """
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        for key in ("message", "error", "detail"):
            candidate = body.get(key)
            if isinstance(candidate, dict):
                candidate = candidate.get("message")
            if isinstance(candidate, str) and candidate.strip():
                return candidate.strip()

    text = response.text.strip() if body is None else ""
    if text:
        return text[:500]
    return f"{provider} request failed (HTTP {response.status_code})"


class ProviderAdapter:
    """Bazowy adapter HTTP — jedna próba na wywołanie, o ile nie skonfigurowano inaczej."""

    provider: str = ""
    base_url: str = ""

    def __init__(self, http_client: httpx.AsyncClient | None = None, base_url: str | None = None):
        self._http_client = http_client
        if base_url is not None:
            self.base_url = base_url

    async def _credential(self, lookup: CredentialLookup) -> Result[str]:
        return await lookup(self.provider)

    async def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """
        Wysyła żądanie. Ponawia wyłącznie błędy transportowe i tylko gdy
        PROVIDER_MAX_ATTEMPTS > 1; domyślnie dokładnie jedna próba.
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(settings.PROVIDER_MAX_ATTEMPTS),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            retry=retry_if_exception_type(httpx.TransportError),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                if self._http_client is not None:
                    return await self._http_client.request(method, url, **kwargs)
                async with httpx.AsyncClient(timeout=settings.PROVIDER_TIMEOUT_SECONDS) as client:
                    return await client.request(method, url, **kwargs)
        raise AssertionError("unreachable")  # pragma: no cover

    async def request(self, method: str, path: str, **kwargs: Any) -> Result[httpx.Response]:
        """Żądanie z mapowaniem błędów na taksonomię dostawców."""
        url = path if path.startswith("http") else f"{self.base_url}{path}"
        try:
            response = await self._send(method, url, **kwargs)
        except httpx.TransportError as exc:
            logger.warning("Błąd transportu", provider=self.provider, url=url, error=str(exc))
            return Result.failure(
                TransportError(f"{self.provider}: {exc.__class__.__name__}: {exc}", provider=self.provider)
            )

        if not response.is_success:
            message = extract_error_message(response, self.provider)
            logger.warning(
                "Dostawca zwrócił błąd",
                provider=self.provider,
                status_code=response.status_code,
                error=message,
            )
            return Result.failure(
                UpstreamError(message, provider=self.provider, status_code=response.status_code)
            )

        return Result.success(response)


def json_body(response: httpx.Response) -> dict[str, Any]:
    """Treść JSON odpowiedzi albo pusty słownik, gdy to nie jest obiekt JSON."""
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}
