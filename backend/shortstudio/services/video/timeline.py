"""
Budowanie opisu montażu (edit) dla serwisu renderującego.
Jeden klip wizualny na scenę + nakładka z narracją + ścieżka lektora.
"""

from collections.abc import Iterable
from pathlib import PurePosixPath
from typing import Any
from urllib.parse import urlparse

from shortstudio.core.exceptions import ValidationError
from shortstudio.services.scripts.parser import Scene

VIDEO_EXTENSIONS = {".mp4", ".mov", ".webm", ".m4v"}

OUTPUT_FORMAT = {
    "format": "mp4",
    "resolution": "1080",
    "aspectRatio": "9:16",
}


def asset_type(url: str) -> str:
    suffix = PurePosixPath(urlparse(url).path).suffix.lower()
    return "video" if suffix in VIDEO_EXTENSIONS else "image"


def _visual_clip(scene: Scene) -> dict[str, Any]:
    return {
        "asset": {"type": asset_type(scene.asset_ref), "src": scene.asset_ref},
        "start": scene.start_offset_seconds,
        "length": scene.duration_seconds,
        "transition": {"in": "fade", "out": "fade"},
        "effect": "zoomIn",
        "fit": "cover",
    }


def _title_clip(scene: Scene) -> dict[str, Any]:
    return {
        "asset": {
            "type": "title",
            "text": scene.narration_text,
            "style": "minimal",
            "size": "medium",
            "position": "bottom",
        },
        "start": scene.start_offset_seconds,
        "length": scene.duration_seconds,
    }


def build_timeline(
    scenes: Iterable[Scene],
    voiceover_url: str,
    *,
    callback_url: str | None = None,
    background: str = "#000000",
) -> dict[str, Any]:
    """Zwraca kompletny edit: timeline + output (+ opcjonalny callback)."""
    scenes = list(scenes)
    if not scenes:
        raise ValidationError("Skrypt nie zawiera żadnej sceny ze znacznikiem czasu")

    visuals = [_visual_clip(scene) for scene in scenes]
    captions = [_title_clip(scene) for scene in scenes if scene.narration_text]

    # Pierwsza ścieżka leży na wierzchu, napisy nad obrazem
    tracks = []
    if captions:
        tracks.append({"clips": captions})
    tracks.append({"clips": visuals})

    edit: dict[str, Any] = {
        "timeline": {
            "soundtrack": {"src": voiceover_url, "effect": "fadeIn"},
            "background": background,
            "tracks": tracks,
        },
        "output": dict(OUTPUT_FORMAT),
    }
    if callback_url:
        edit["callback"] = callback_url
    return edit
