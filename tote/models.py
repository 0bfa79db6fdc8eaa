"""Data models returned by the preview and cache operations."""
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional


@dataclass
class LinkMetadata:
    """Presentation metadata extracted from a page."""

    title: str
    description: Optional[str] = None
    icon: Optional[str] = None
    image: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class CacheResult:
    """Outcome of caching a link: its metadata plus the local file paths.

    ``icon_path`` and ``image_path`` are only set when the asset URL resolved
    and the download and write both succeeded. ``icon``/``image`` keep the
    remote URLs either way.
    """

    title: str
    content_path: str
    description: Optional[str] = None
    icon: Optional[str] = None
    image: Optional[str] = None
    icon_path: Optional[str] = None
    image_path: Optional[str] = None

    @property
    def metadata(self) -> LinkMetadata:
        return LinkMetadata(
            title=self.title,
            description=self.description,
            icon=self.icon,
            image=self.image,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class RefreshOutcome:
    """Per-link result of a batch refresh."""

    id: str
    url: str
    result: Optional[CacheResult] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.result is not None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"id": self.id, "url": self.url}
        if self.result is not None:
            data["status"] = "cached"
            data["result"] = self.result.to_dict()
        else:
            data["status"] = "failed"
            data["error"] = self.error
        return data
