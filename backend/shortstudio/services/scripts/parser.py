"""
Parser skryptu — zamienia tekst ze znacznikami czasu na sekwencję scen.

Format wejścia (odpowiedź modelu językowego):

    TITLE: Tytuł filmu

    [00:00] [opis wizualny]
    Tekst narracji

    [00:05] [opis wizualny]
    Tekst narracji

Linia ze znacznikiem `[mm:ss]` otwiera scenę; następna niepusta linia
(o ile sama nie jest znacznikiem) to narracja. Każda scena trwa stałą
liczbę sekund, media przypisywane są cyklicznie w kolejności scen.
"""

import re
from collections.abc import Iterator, Sequence
from dataclasses import dataclass

from shortstudio.core.exceptions import ParseError, ValidationError

DEFAULT_SCENE_DURATION = 5

_TIMESTAMP = re.compile(r"\[(\d{1,3}):(\d{1,2})\]")
# Kształt znacznika na początku linii, np. [0a:15] albo [mm:ss]; notatki w rodzaju [Cut: B2] mają spację
_TIMESTAMP_LIKE = re.compile(r"^\s*\[([^\]\s:]{1,3}):([^\]\s:]{1,3})\]")
_VISUAL_HINT = re.compile(r"\[([^\]]+)\]")
_TITLE = re.compile(r"^\s*TITLE:\s*(.+?)\s*$", re.IGNORECASE | re.MULTILINE)


@dataclass(frozen=True)
class Scene:
    start_offset_seconds: int
    duration_seconds: int
    asset_ref: str
    narration_text: str | None = None
    visual_hint: str | None = None


def _match_timestamp(line: str, line_number: int) -> tuple[int, str | None] | None:
    """Zwraca (offset, wskazówka wizualna) albo None dla linii bez znacznika."""
    shaped = _TIMESTAMP_LIKE.match(line)
    if shaped and not _TIMESTAMP.fullmatch(shaped.group(0).strip()):
        raise ParseError(
            f"Nieprawidłowy znacznik czasu w linii {line_number}: {line.strip()!r}",
            line_number=line_number,
            line=line,
        )

    match = _TIMESTAMP.search(line)
    if match is None:
        return None

    minutes, seconds = int(match.group(1)), int(match.group(2))
    if seconds >= 60:
        raise ParseError(
            f"Sekundy poza zakresem w linii {line_number}: {line.strip()!r}",
            line_number=line_number,
            line=line,
        )

    rest = line[match.end():]
    hint = _VISUAL_HINT.search(rest)
    visual = hint.group(1).strip() if hint else rest.strip() or None
    return minutes * 60 + seconds, visual


class SceneSequence:
    """
    Leniwa, skończona sekwencja scen. Każde `iter()` zaczyna od początku,
    więc tę samą sekwencję można przejść wielokrotnie.
    """

    def __init__(
        self,
        content: str,
        assets: Sequence[str],
        scene_duration: int = DEFAULT_SCENE_DURATION,
    ):
        self.content = content
        self.assets = list(assets)
        self.scene_duration = scene_duration

        if not self.assets and _TIMESTAMP.search(content):
            raise ValidationError("Lista mediów jest pusta — nie można przypisać zasobu do sceny")
        blank = [position for position, ref in enumerate(self.assets) if not ref or not ref.strip()]
        if blank:
            raise ValidationError(f"Pusta referencja medium na pozycji {blank[0]}")

    def __iter__(self) -> Iterator[Scene]:
        lines = self.content.splitlines()
        index = 0
        for position, line in enumerate(lines):
            parsed = _match_timestamp(line, position + 1)
            if parsed is None:
                continue
            start, visual = parsed

            yield Scene(
                start_offset_seconds=start,
                duration_seconds=self.scene_duration,
                asset_ref=self.assets[index % len(self.assets)],
                narration_text=self._narration_after(lines, position),
                visual_hint=visual,
            )
            index += 1

    @staticmethod
    def _narration_after(lines: list[str], position: int) -> str | None:
        for candidate in lines[position + 1:]:
            if not candidate.strip():
                continue
            if _TIMESTAMP.search(candidate):
                return None
            return candidate.strip()
        return None


def extract_title(content: str, fallback: str = "") -> str:
    match = _TITLE.search(content)
    if match:
        return match.group(1).strip().strip("[]").strip() or fallback
    return fallback


def narration_text(scenes: Sequence[Scene] | SceneSequence) -> str:
    """Cała narracja jako jeden tekst dla lektora (jedna ścieżka audio)."""
    return " ".join(scene.narration_text for scene in scenes if scene.narration_text)


def visual_hints(content: str) -> list[str]:
    """Wskazówki wizualne ze znaczników — podpowiedzi zapytań do wyszukiwarki mediów."""
    hints: list[str] = []
    for number, line in enumerate(content.splitlines(), start=1):
        parsed = _match_timestamp(line, number)
        if parsed and parsed[1] and parsed[1] not in hints:
            hints.append(parsed[1])
    return hints
