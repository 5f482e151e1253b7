from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Any, Dict, List, Mapping, Optional

INT_FIELDS = ("x", "y", "width", "height")
TEXT_FIELDS = ("title", "url")


class _View(BaseModel):
    # camelCase on the wire, ORM rows accepted directly
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class FrameView(_View):
    id: str
    collection_id: str
    x: int
    y: int
    width: int
    height: int
    title: Optional[str] = None
    url: Optional[str] = None


class CollectionSummary(_View):
    # No owner id here; collections are listed publicly
    id: str
    name: str


class CollectionView(CollectionSummary):
    frames: List[FrameView] = Field(default_factory=list)


class UserView(_View):
    username: str


class FramesView(_View):
    user: UserView
    collection: CollectionView
    collections: List[CollectionSummary]


def extract_frame_data(form: Mapping[str, Any]) -> Dict[str, Any]:
    """Pick the frame columns present in a submitted form.

    Integer fields go through ``int()``; a malformed value raises ``ValueError``.
    Empty text fields are stored as ``None``.
    """
    data: Dict[str, Any] = {}
    for name in INT_FIELDS:
        if name in form:
            data[name] = int(form[name])
    for name in TEXT_FIELDS:
        if name in form:
            value = str(form[name]).strip()
            data[name] = value or None
    return data
