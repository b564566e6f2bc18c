"""Banner aggregate: promotional content shown on the storefront.

A banner is displayed while it is ACTIVE and inside its optional
[start_date, end_date] window. Lower priority numbers are shown first.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, Integer, String, Text

from storefront.domain import storefront


class BannerType(Enum):
    IMAGE = "image"
    VIDEO = "video"
    CAROUSEL = "carousel"
    TEXT = "text"


class BannerPosition(Enum):
    HEADER = "header"
    FOOTER = "footer"
    SIDEBAR = "sidebar"
    MAIN = "main"
    POPUP = "popup"
    CATEGORY = "category"
    PRODUCT = "product"


class BannerStatus(Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    INACTIVE = "inactive"


BANNER_FIELDS = (
    "title",
    "description",
    "banner_type",
    "position",
    "status",
    "image_url",
    "video_url",
    "text_content",
    "button_text",
    "link_url",
    "alt_text",
    "priority",
    "start_date",
    "end_date",
)


def _aware(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


@storefront.aggregate
class Banner:
    title: String(required=True, max_length=255)
    description: Text()
    banner_type: String(choices=BannerType, default=BannerType.IMAGE.value)
    position: String(choices=BannerPosition, default=BannerPosition.MAIN.value)
    status: String(choices=BannerStatus, default=BannerStatus.DRAFT.value)
    image_url: String(max_length=500)
    video_url: String(max_length=500)
    text_content: Text()
    button_text: String(max_length=100)
    link_url: String(max_length=500)
    alt_text: String(max_length=255)
    priority: Integer(default=0)
    start_date: DateTime()
    end_date: DateTime()
    created_by: Identifier()
    created_at: DateTime()
    updated_at: DateTime()

    @invariant.post
    def window_must_be_ordered(self):
        if self.start_date and self.end_date and _aware(self.end_date) <= _aware(self.start_date):
            raise ValidationError({"end_date": ["End date must be after start date"]})

    @classmethod
    def create(cls, title, created_by=None, **details):
        now = datetime.now(UTC)
        values = {key: value for key, value in details.items() if key in BANNER_FIELDS and value is not None}
        return cls(title=title, created_by=created_by, created_at=now, updated_at=now, **values)

    def update(self, **details):
        for key, value in details.items():
            if key in BANNER_FIELDS and value is not None:
                setattr(self, key, value)
        self.updated_at = datetime.now(UTC)

    def is_displayed_at(self, moment: datetime) -> bool:
        if BannerStatus(self.status) != BannerStatus.ACTIVE:
            return False
        if self.start_date and _aware(self.start_date) > moment:
            return False
        if self.end_date and _aware(self.end_date) < moment:
            return False
        return True
