"""Schematy kluczy API dostawców."""

from pydantic import BaseModel, Field


class ApiKeysUpdateRequest(BaseModel):
    """Zapis nadpisuje cały zestaw; puste wartości są pomijane."""

    keys: dict[str, str] = Field(default_factory=dict)


class ApiKeysResponse(BaseModel):
    """Wartości zamaskowane — jawny sekret nigdy nie opuszcza serwera."""

    keys: dict[str, str]
