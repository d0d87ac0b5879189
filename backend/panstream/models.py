from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# Scalar fields are typed ``Any``: upstream values pass through without coercion.
class QualityOption(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    quality: Any = None
    is_default: Any = Field(default=0, alias="isDefault")
    is_vip_equity: Any = Field(default=False, alias="isVipEquity")
    video_path: Any = Field(default="", alias="videoPath")


class CdnEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    is_default: Any = Field(default=0, alias="isDefault")
    video_path_list: List[QualityOption] = Field(default_factory=list, alias="videoPathList")


class DramaCard(BaseModel):
    """Canonical drama record shared by listings, search results and the watch page."""

    model_config = ConfigDict(populate_by_name=True)

    book_id: Any = Field(default="", alias="bookId")
    book_name: Any = Field(default="", alias="bookName")
    book_cover: Any = Field(default="", alias="bookCover")
    introduction: Any = ""
    play_count: Any = Field(default="", alias="playCount")
    tags: List[Any] = Field(default_factory=list)
    total_chapter_num: Any = Field(default=0, alias="totalChapterNum")
    chapter_img: Any = Field(default="", alias="chapterImg")
    cdn_list: List[CdnEntry] = Field(default_factory=list, alias="cdnList")
    video_path: Any = Field(default="", alias="videoPath")


class AggregateFeed(BaseModel):
    """One page worth of cards keyed by source name."""

    model_config = ConfigDict(populate_by_name=True)

    sections: Dict[str, List[DramaCard]] = Field(default_factory=dict)
    qualities: List[QualityOption] = Field(default_factory=list)
    default_quality: Optional[QualityOption] = Field(default=None, alias="defaultQuality")

    def section(self, name: str) -> List[DramaCard]:
        return self.sections.get(name, [])


class TitleAggregate(AggregateFeed):
    """Watch page payload: one drama, its chapters and the playback quality choice."""

    drama: DramaCard
    chapters: List[Any] = Field(default_factory=list)
