"""
Taksonomia błędów domenowych.

Adaptery dostawców nigdy nie rzucają tych wyjątków poza swoją granicę —
zwracają je opakowane w `Result`. Orkiestrator i warstwa API rzucają je
bezpośrednio; API mapuje je na odpowiedzi HTTP w jednym handlerze.
"""


class StudioError(Exception):
    """Bazowy błąd aplikacji."""

    code = "studio_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class ProviderError(StudioError):
    """Błąd zgłoszony przez adapter zewnętrznego dostawcy."""

    code = "provider_error"

    def __init__(self, message: str, provider: str = ""):
        super().__init__(message)
        self.provider = provider


class CredentialMissing(ProviderError):
    code = "credential_missing"

    def __init__(self, provider: str):
        super().__init__(f"Brak klucza API dla dostawcy '{provider}'", provider=provider)


class TransportError(ProviderError):
    """Błąd sieci lub timeout — odpowiedź od dostawcy nie dotarła."""

    code = "transport_error"


class UpstreamError(ProviderError):
    """Dostawca odpowiedział kodem spoza 2xx; `message` to jego komunikat."""

    code = "upstream_error"

    def __init__(self, message: str, provider: str = "", status_code: int | None = None):
        super().__init__(message, provider=provider)
        self.status_code = status_code


class ValidationError(StudioError):
    code = "validation_error"


class PreconditionFailed(StudioError):
    """Krok workflow uruchomiony w złej kolejności."""

    code = "precondition_failed"


class ParseError(StudioError):
    code = "parse_error"

    def __init__(self, message: str, line_number: int | None = None, line: str | None = None):
        super().__init__(message)
        self.line_number = line_number
        self.line = line


class NotFound(StudioError):
    code = "not_found"
