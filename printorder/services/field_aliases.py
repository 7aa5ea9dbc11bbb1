# printorder/services/field_aliases.py
"""
Single source of truth for domain field <-> storage column names.

Each entry names:
  - field:  attribute on the domain model (Order / OrderItem / OrderRecord)
  - column: canonical column in the hosted database
  - legacy: other keys the same value may be stored under, tried in order
            after `column` when reading (rows written before a column
            rename, and camelCase rows from the old client-side store)
  - kind:   value codec used by the row mapper

Both mapping directions in row_mapper.py are derived from these tables.
"""
from dataclasses import dataclass
from enum import Enum


class ValueKind(str, Enum):
    TEXT = "text"
    NUMBER = "number"
    SERVICE_TYPE = "service_type"
    JSON_LIST = "json_list"
    BRIEF = "brief"
    TIMESTAMP = "timestamp"


@dataclass(frozen=True)
class FieldAlias:
    field: str
    column: str
    legacy: tuple[str, ...] = ()
    kind: ValueKind = ValueKind.TEXT

    @property
    def read_keys(self) -> tuple[str, ...]:
        return (self.column, *self.legacy)


ORDER_ALIASES: tuple[FieldAlias, ...] = (
    FieldAlias("full_name", "full_name", ("fullName",)),
    FieldAlias("shop_name", "shop_name", ("shopName",)),
    FieldAlias("tel", "tel"),
    FieldAlias("email", "email"),
    FieldAlias("facebook", "facebook"),
    FieldAlias("line", "line"),
    FieldAlias(
        "service_type_code",
        "service_type_code",
        ("serviceTypeCode",),
        ValueKind.SERVICE_TYPE,
    ),
    FieldAlias("shipping_name", "shipping_name", ("shippingName",)),
    FieldAlias("shipping_tel", "shipping_tel", ("shippingTel",)),
    FieldAlias("shipping_address", "shipping_address", ("shippingAddress",)),
    FieldAlias("theme_code", "theme_code", ("themeCode",)),
    FieldAlias(
        "color_codes",
        "mood_tone",
        ("moodTone", "color_codes", "colorCodes"),
        ValueKind.JSON_LIST,
    ),
    FieldAlias(
        "design_info_text",
        "brief",
        ("design_info_text", "designInfoText"),
        ValueKind.BRIEF,
    ),
)

# Back-office fields of a stored order. Never part of a customer submission.
ORDER_META_ALIASES: tuple[FieldAlias, ...] = (
    FieldAlias("code", "code"),
    FieldAlias("status_code", "status_code", ("statusCode",)),
    FieldAlias("payment_status_code", "payment_status_code", ("paymentStatusCode",)),
    FieldAlias(
        "designer_owner_id",
        "designer_owner_id",
        ("designerOwnerId",),
        ValueKind.NUMBER,
    ),
    FieldAlias(
        "created_at",
        "created_date",
        ("created_at", "createdAt"),
        ValueKind.TIMESTAMP,
    ),
    FieldAlias(
        "updated_at",
        "updated_date",
        ("updated_at", "updatedAt"),
        ValueKind.TIMESTAMP,
    ),
)

ITEM_ALIASES: tuple[FieldAlias, ...] = (
    FieldAlias("product_code", "item_type_code", ("product_code", "itemTypeCode")),
    FieldAlias("product_other", "item_type_other", ("product_other", "itemTypeOther")),
    FieldAlias("size_code", "size_code", ("sizeCode",)),
    FieldAlias("size_width", "width", ("size_width", "sizeWidth"), ValueKind.NUMBER),
    FieldAlias("size_height", "height", ("size_height", "sizeHeight"), ValueKind.NUMBER),
    FieldAlias("orientation_code", "layout_code", ("orientation_code", "layoutCode")),
    FieldAlias("coating_code", "texture_code", ("coating_code", "textureCode")),
    FieldAlias("page_option_code", "side_code", ("page_option_code", "sideCode")),
    FieldAlias("image_option_code", "image_code", ("image_option_code", "imageCode")),
    FieldAlias("brand_option_code", "decorate_code", ("brand_option_code", "decorateCode")),
    FieldAlias("quantity", "quantity", (), ValueKind.NUMBER),
)

# Column holding the parent order id on item rows.
ITEM_ORDER_ID_COLUMN = "order_id"
