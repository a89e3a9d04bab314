"""
Kodowanie sekretów przechowywanych w bazie.

`Base64Codec` to wyłącznie odwracalne zaciemnienie (format starszych rekordów),
`FernetCodec` to faktyczne szyfrowanie symetryczne. Wybór zależy od tego,
czy skonfigurowano CREDENTIALS_ENCRYPTION_KEY.
"""

import base64
import binascii
from abc import ABC, abstractmethod

import structlog
from cryptography.fernet import Fernet, InvalidToken

from shortstudio.core.config import Settings, get_settings

logger = structlog.get_logger()


class SecretCodec(ABC):
    @abstractmethod
    def encode(self, secret: str) -> str:
        """Zamienia sekret na postać do zapisu w bazie."""

    @abstractmethod
    def decode(self, stored: str) -> str:
        """Odwraca `encode`. Dla uszkodzonej wartości zwraca pusty napis."""


class Base64Codec(SecretCodec):
    def encode(self, secret: str) -> str:
        return base64.b64encode(secret.encode("utf-8")).decode("ascii")

    def decode(self, stored: str) -> str:
        try:
            return base64.b64decode(stored.encode("ascii"), validate=True).decode("utf-8")
        except (binascii.Error, UnicodeError, ValueError):
            logger.warning("Nie udało się zdekodować sekretu (base64)")
            return ""


class FernetCodec(SecretCodec):
    def __init__(self, key: str | bytes):
        self._fernet = Fernet(key)

    def encode(self, secret: str) -> str:
        return self._fernet.encrypt(secret.encode("utf-8")).decode("ascii")

    def decode(self, stored: str) -> str:
        try:
            return self._fernet.decrypt(stored.encode("ascii")).decode("utf-8")
        except (InvalidToken, UnicodeError, ValueError):
            logger.warning("Nie udało się odszyfrować sekretu (Fernet)")
            return ""


def get_codec(settings: Settings | None = None) -> SecretCodec:
    settings = settings or get_settings()
    if settings.CREDENTIALS_ENCRYPTION_KEY:
        return FernetCodec(settings.CREDENTIALS_ENCRYPTION_KEY)
    return Base64Codec()
