"""
Projection of raw catalog objects onto canonical drama cards.

Field values are copied verbatim from the first candidate key that is present and not
null; nothing is coerced or range-checked. Non-object inputs produce no card.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from backend.panstream.models import CdnEntry, DramaCard, QualityOption

STANDARD_QUALITY = 720

# Canonical field -> raw keys in priority order, plus the default for absent values.
CARD_FIELDS: Dict[str, Tuple[Tuple[str, ...], Any]] = {
    "book_id": (("bookId", "id"), ""),
    "book_name": (("bookName", "name", "title"), ""),
    "book_cover": (("bookCover", "coverWap", "cover"), ""),
    "introduction": (("introduction", "intro", "description"), ""),
    "play_count": (("playCount",), ""),
    "total_chapter_num": (("totalChapterNum", "chapterCount"), 0),
    "chapter_img": (("chapterImg",), ""),
    "video_path": (("videoPath",), ""),
}
LIST_FIELDS: Dict[str, Tuple[str, ...]] = {
    "tags": ("tags", "tagNames"),
    "cdn_list": ("cdnList",),
}


@dataclass(slots=True)
class QualitySelection:
    qualities: List[QualityOption] = field(default_factory=list)
    default: Optional[QualityOption] = None


def _is_flagged(value: Any) -> bool:
    # Only the integer 1 marks a default; booleans and strings do not.
    return isinstance(value, int) and not isinstance(value, bool) and value == 1


def _first_present(raw: Dict[str, Any], keys: Iterable[str]) -> Tuple[bool, Any]:
    for key in keys:
        value = raw.get(key)
        if value is not None:
            return True, value
    return False, None


def _quality_option(raw: Any) -> Optional[QualityOption]:
    if isinstance(raw, QualityOption):
        return raw
    if not isinstance(raw, dict):
        return None
    return QualityOption.model_validate(raw)


def _cdn_entry(raw: Any) -> Optional[CdnEntry]:
    if isinstance(raw, CdnEntry):
        return raw
    if not isinstance(raw, dict):
        return None
    data = dict(raw)
    options = data.get("videoPathList")
    data["videoPathList"] = [
        option
        for option in (_quality_option(item) for item in (options if isinstance(options, list) else []))
        if option is not None
    ]
    return CdnEntry.model_validate(data)


def normalize_card(raw: Any) -> Optional[DramaCard]:
    """Project a raw drama object onto a ``DramaCard``; ``None`` for non-objects."""
    if not isinstance(raw, dict):
        return None

    values: Dict[str, Any] = {}
    for name, (keys, default) in CARD_FIELDS.items():
        found, value = _first_present(raw, keys)
        values[name] = value if found else default

    for name, keys in LIST_FIELDS.items():
        found, value = _first_present(raw, keys)
        values[name] = value if found and isinstance(value, list) else []

    values["cdn_list"] = [entry for entry in map(_cdn_entry, values["cdn_list"]) if entry is not None]
    return DramaCard(**values)


def normalize_cards(raws: Iterable[Any]) -> List[DramaCard]:
    return [card for card in map(normalize_card, raws) if card is not None]


def pick_default_quality(cdn_list: Optional[Sequence[Union[CdnEntry, Dict[str, Any]]]]) -> QualitySelection:
    """
    Choose the CDN entry and playback quality to start with.

    CDN: the one flagged ``isDefault == 1``, else the first. Quality within it: flagged
    default, else the 720p rendition, else the first listed, else none.
    """
    entries = [entry for entry in map(_cdn_entry, cdn_list or []) if entry is not None]
    if not entries:
        return QualitySelection()

    cdn = next((entry for entry in entries if _is_flagged(entry.is_default)), entries[0])
    options = cdn.video_path_list
    default = (
        next((option for option in options if _is_flagged(option.is_default)), None)
        or next((option for option in options if option.quality == STANDARD_QUALITY), None)
        or (options[0] if options else None)
    )
    return QualitySelection(qualities=list(options), default=default)
