import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

IMAGE_URL_PATTERN = re.compile(r"(https?://.*\.(?:png|jpg|gif|webp))", re.IGNORECASE)
IMAGE_URL_PATTERN_DISPLAY = r"/(https?:\/\/.*\.(?:png|jpg|gif|webp))/i"


class CamelModel(BaseModel):
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)


class PostCreate(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, extra="forbid")

    title: str = Field(min_length=1, max_length=255)
    content: str = Field(min_length=1)
    image_url: str = Field(min_length=1, max_length=2048)
    category: str = Field(min_length=1)

    @field_validator("image_url")
    @classmethod
    def image_url_points_to_image(cls, value: str) -> str:
        # search, not fullmatch: query strings after the extension are fine
        if not IMAGE_URL_PATTERN.search(value):
            raise PydanticCustomError("string.pattern.base", "fails to match the required pattern")
        return value


class PostUpdate(PostCreate):
    """Partial update body.

    Defaults are not validated, so an omitted field stays ``None`` while an
    explicit ``null`` is still rejected as a non-string.
    """

    title: str = Field(default=None, min_length=1, max_length=255)
    content: str = Field(default=None, min_length=1)
    image_url: str = Field(default=None, min_length=1, max_length=2048)
    category: str = Field(default=None, min_length=1)


class CategoryOut(CamelModel):
    id: int
    name: str
    created_at: datetime


class PostSummaryOut(CamelModel):
    id: int
    title: str
    image_url: str
    category_id: int
    created_at: datetime
    category: CategoryOut


class PostOut(PostSummaryOut):
    content: str


class PostListOut(CamelModel):
    posts: list[PostSummaryOut]
