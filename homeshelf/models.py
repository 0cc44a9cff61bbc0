"""Catalog entities and the display structures built from them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, FrozenSet, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from .services.base import Catalog


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class MediaItem(BaseModel):
    """Read-only snapshot of a catalog item as returned by the server."""

    id: Optional[str] = Field(default=None, alias="Id")
    name: Optional[str] = Field(default=None, alias="Name")
    overview: Optional[str] = Field(default=None, alias="Overview")
    type: Optional[str] = Field(default=None, alias="Type")
    tags: List[str] = Field(default_factory=list, alias="Tags")
    backdrop_image_tags: List[str] = Field(default_factory=list, alias="BackdropImageTags")
    parent_backdrop_item_id: Optional[str] = Field(default=None, alias="ParentBackdropItemId")
    parent_backdrop_image_tags: List[str] = Field(default_factory=list, alias="ParentBackdropImageTags")
    image_tags: Dict[str, str] = Field(default_factory=dict, alias="ImageTags")

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    @field_validator("id", "parent_backdrop_item_id", mode="before")
    @classmethod
    def _normalise_identifier(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @field_validator("tags", "backdrop_image_tags", "parent_backdrop_image_tags", "image_tags", mode="before")
    @classmethod
    def _null_collections(cls, value: Any, info) -> Any:
        if value is None:
            return {} if info.field_name == "image_tags" else []
        return value

    @property
    def primary_image_tag(self) -> Optional[str]:
        return _blank_to_none(self.image_tags.get("Primary"))


class Genre(BaseModel):
    """Genre entity; only complete genres (id and name) become rows."""

    id: Optional[str] = Field(default=None, alias="Id")
    name: Optional[str] = Field(default=None, alias="Name")

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    @field_validator("id", "name", mode="before")
    @classmethod
    def _normalise(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @property
    def is_complete(self) -> bool:
        return bool(self.id and self.name)


class ItemQuery(BaseModel):
    """Parameters for an item fetch.

    Display groups carry one of these instead of a callback so that the
    renderer can resolve them later through whichever catalog it holds.
    """

    tags: List[str] = Field(default_factory=list)
    include_item_types: List[str] = Field(default_factory=list)
    limit: Optional[int] = Field(default=None, ge=0)
    fields: List[str] = Field(default_factory=list)
    recursive: bool = False
    genre_ids: List[str] = Field(default_factory=list)
    sort_by: Optional[str] = None
    image_type_limit: Optional[int] = Field(default=None, ge=0)
    enable_image_types: List[str] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid", frozen=True)

    def to_params(self) -> Dict[str, str]:
        """Render server query parameters, omitting unset values."""

        params: Dict[str, str] = {}
        lists = {
            "Tags": self.tags,
            "IncludeItemTypes": self.include_item_types,
            "Fields": self.fields,
            "GenreIds": self.genre_ids,
            "EnableImageTypes": self.enable_image_types,
        }
        for key, values in lists.items():
            if values:
                params[key] = ",".join(values)
        if self.limit is not None:
            params["Limit"] = str(self.limit)
        if self.recursive:
            params["Recursive"] = "true"
        if self.sort_by:
            params["SortBy"] = self.sort_by
        if self.image_type_limit is not None:
            params["ImageTypeLimit"] = str(self.image_type_limit)
        return params


GroupKind = Literal["featured", "genre"]


@dataclass(frozen=True)
class DisplayGroup:
    """A labeled row of items destined for one rendered section."""

    label: str
    kind: GroupKind
    items: Tuple[MediaItem, ...] = ()
    query: Optional[ItemQuery] = None

    @property
    def is_lazy(self) -> bool:
        return self.query is not None

    async def load_items(self, catalog: "Catalog") -> List[MediaItem]:
        """Return the group's items, fetching them if the group is lazy.

        Safe to call repeatedly; every call on a lazy group issues a new fetch.
        """

        if self.query is None:
            return list(self.items)
        return await catalog.fetch_items(self.query)


@dataclass(frozen=True)
class CarouselSelection:
    """Merged carousel items plus the identifiers that came from the featured pool."""

    items: Tuple[MediaItem, ...] = ()
    featured_ids: FrozenSet[str] = frozenset()

    def is_featured(self, item: MediaItem) -> bool:
        return item.id is not None and item.id in self.featured_ids
