# printorder/schemas/order.py
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    EmailStr,
    Field,
    StringConstraints,
    ValidationError,
    ValidationInfo,
    field_validator,
)
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from printorder.models.order import (
    PRODUCT_OTHER,
    SIZE_CUSTOM,
    CamelModel,
    Order,
    OrderRecord,
    ServiceType,
)

# Thai phone: leading 0 then 8-9 digits.
PHONE_PATTERN = r"^0\d{8,9}$"

SHORT_TEXT_MAX = 255
LONG_TEXT_MAX = 2000
MAX_COLOR_CODES = 3

# Error type of the order form's own rules; their message is shown as-is.
ORDER_RULE = "order_rule"

CONTACT_REQUIRED = "facebook or line is required"
DESIGN_ITEM_REQUIRED = "at least one design item is required"


def _clean_text(v: Any) -> Any:
    """Strip strings; a blank string counts as not provided."""
    if isinstance(v, str):
        return v.strip() or None
    return v


def _blank_to_none(v: Any) -> Any:
    if isinstance(v, str) and not v.strip():
        return None
    return v


def _number_input(v: Any) -> Any:
    """Form numbers may arrive as strings. Booleans are not numbers."""
    if isinstance(v, bool):
        raise PydanticCustomError("bool_not_number", "booleans are not numbers")
    if isinstance(v, str):
        return v.strip() or None
    return v


def _none_to_list(v: Any) -> Any:
    return [] if v is None else v


def _rule_error(message: str, **ctx: Any) -> PydanticCustomError:
    return PydanticCustomError(ORDER_RULE, message, ctx or None)


ShortText = Annotated[str, StringConstraints(max_length=SHORT_TEXT_MAX)]
LongText = Annotated[str, StringConstraints(max_length=LONG_TEXT_MAX)]
Phone = Annotated[str, StringConstraints(pattern=PHONE_PATTERN)]

RequiredText = Annotated[ShortText, BeforeValidator(_clean_text)]
OptionalText = Annotated[Optional[ShortText], BeforeValidator(_clean_text)]
RequiredLongText = Annotated[LongText, BeforeValidator(_clean_text)]
OptionalLongText = Annotated[Optional[LongText], BeforeValidator(_clean_text)]
# The design brief keeps its own whitespace.
Brief = Annotated[Optional[LongText], BeforeValidator(_blank_to_none)]
RequiredPhone = Annotated[Phone, BeforeValidator(_clean_text)]
OptionalPhone = Annotated[Optional[Phone], BeforeValidator(_clean_text)]
OptionalEmail = Annotated[Optional[EmailStr], BeforeValidator(_clean_text)]
ColorCode = Annotated[ShortText, BeforeValidator(_clean_text)]

Quantity = Annotated[int, Field(gt=0), BeforeValidator(_number_input)]
Dimension = Annotated[
    Optional[Annotated[float, Field(gt=0, allow_inf_nan=False)]],
    BeforeValidator(_number_input),
]
OwnerId = Annotated[Optional[Annotated[int, Field(gt=0)]], BeforeValidator(_number_input)]


def _check_color_count(v: list[str] | None) -> list[str] | None:
    # Counted as submitted; repeated codes still count.
    if not v or len(v) > MAX_COLOR_CODES:
        raise _rule_error("colorCodes must be 1-{max} for design", max=MAX_COLOR_CODES)
    return v


# -------- Submission (public order form) --------


class OrderItemSubmission(CamelModel):
    """
    Item of a production-only order.

    Carried through to storage as given; a value of the wrong shape is
    dropped (stored as null) instead of rejecting the order.
    """

    product_code: OptionalText = None
    product_other: OptionalText = None
    size_code: OptionalText = None
    size_width: Dimension = None
    size_height: Dimension = None
    orientation_code: OptionalText = None
    coating_code: OptionalText = None
    page_option_code: OptionalText = None
    image_option_code: OptionalText = None
    brand_option_code: OptionalText = None
    quantity: Optional[Quantity] = None

    @field_validator("*", mode="wrap")
    @classmethod
    def drop_invalid(cls, value: Any, handler) -> Any:
        try:
            return handler(value)
        except ValidationError:
            return None


class DesignItemSubmission(CamelModel):
    """
    Item of a design order: every code is required.

    - productOther is required when productCode == OTHER
    - sizeWidth / sizeHeight are required when sizeCode == CUSTOM
    """

    product_code: RequiredText
    product_other: OptionalText = Field(default=None, validate_default=True)
    size_code: RequiredText
    size_width: Dimension = Field(default=None, validate_default=True)
    size_height: Dimension = Field(default=None, validate_default=True)
    orientation_code: RequiredText
    coating_code: RequiredText
    page_option_code: RequiredText
    image_option_code: RequiredText
    brand_option_code: RequiredText
    quantity: Quantity

    @field_validator("product_other")
    @classmethod
    def other_product_needs_description(cls, v: str | None, info: ValidationInfo) -> str | None:
        if v is None and info.data.get("product_code") == PRODUCT_OTHER:
            raise _rule_error("productOther is required when productCode={code}", code=PRODUCT_OTHER)
        return v

    @field_validator("size_width", "size_height")
    @classmethod
    def custom_size_needs_dimensions(cls, v: float | None, info: ValidationInfo) -> float | None:
        if v is None and info.data.get("size_code") == SIZE_CUSTOM:
            raise _rule_error(
                "{key} is required when sizeCode={size}",
                key=to_camel(info.field_name),
                size=SIZE_CUSTOM,
            )
        return v


class OrderSubmissionBase(CamelModel):
    """Fields checked the same way whatever the service type."""

    full_name: RequiredText
    shop_name: RequiredText
    tel: RequiredPhone
    email: OptionalEmail = None
    line: OptionalText = None
    facebook: OptionalText = Field(default=None, validate_default=True)
    shipping_name: OptionalText = None
    shipping_tel: OptionalPhone = None
    shipping_address: OptionalLongText = None


class _ServiceSubmission(OrderSubmissionBase):
    @field_validator("facebook")
    @classmethod
    def facebook_or_line(cls, v: str | None, info: ValidationInfo) -> str | None:
        # A line value that failed its own checks is not in info.data.
        if v is None and "line" in info.data and info.data["line"] is None:
            raise _rule_error(CONTACT_REQUIRED)
        return v

    def to_order(self) -> Order:
        return Order.model_validate(self.model_dump())


class ProductionOnlySubmission(_ServiceSubmission):
    """Shipping block required; design fields are ignored."""

    service_type_code: Literal["PRODUCTION_ONLY"]
    shipping_name: RequiredText
    shipping_tel: RequiredPhone
    shipping_address: RequiredLongText
    items: Annotated[list[OrderItemSubmission], BeforeValidator(_none_to_list)] = []


class DesignOnlySubmission(_ServiceSubmission):
    """Theme, 1-3 colors and at least one fully specified item required."""

    service_type_code: Literal["DESIGN_ONLY"]
    theme_code: RequiredText
    color_codes: Optional[list[ColorCode]] = Field(default=None, validate_default=True)
    design_info_text: Brief = None
    items: Annotated[list[DesignItemSubmission], BeforeValidator(_none_to_list)] = Field(
        default_factory=list, validate_default=True
    )

    @field_validator("color_codes")
    @classmethod
    def color_count(cls, v: list[str] | None) -> list[str] | None:
        return _check_color_count(v)

    @field_validator("items")
    @classmethod
    def at_least_one_item(cls, v: list[DesignItemSubmission]) -> list[DesignItemSubmission]:
        if not v:
            raise _rule_error(DESIGN_ITEM_REQUIRED)
        return v


class DesignAndProductionSubmission(DesignOnlySubmission):
    service_type_code: Literal["DESIGN_AND_PRODUCTION"]
    shipping_name: RequiredText
    shipping_tel: RequiredPhone
    shipping_address: RequiredLongText


# serviceTypeCode picks the schema; an unknown or missing code stops here.
OrderSubmission = Annotated[
    Union[ProductionOnlySubmission, DesignOnlySubmission, DesignAndProductionSubmission],
    Field(discriminator="service_type_code"),
]


# -------- Partial update (back office) --------


class OrderUpdate(CamelModel):
    """
    Partial update payload. All fields are optional; the ones sent are
    checked with the submission rules.

    Validation context:
      - service_type: effective ServiceType (sent one, else stored one),
        switching on the shipping and design requirements

    `items` is only shape-checked here; its entries are validated by the
    caller against the effective service type.
    """

    service_type_code: Annotated[Optional[ServiceType], BeforeValidator(_clean_text)] = None
    full_name: OptionalText = None
    shop_name: OptionalText = None
    tel: OptionalPhone = None
    email: OptionalEmail = None
    line: OptionalText = None
    facebook: OptionalText = None
    shipping_name: OptionalText = None
    shipping_tel: OptionalPhone = None
    shipping_address: OptionalLongText = None
    theme_code: OptionalText = None
    color_codes: Optional[list[ColorCode]] = None
    design_info_text: Brief = None
    status_code: OptionalText = None
    payment_status_code: OptionalText = None
    designer_owner_id: OwnerId = None
    items: Optional[list[Any]] = None

    @staticmethod
    def _service_type(info: ValidationInfo) -> ServiceType | None:
        return (info.context or {}).get("service_type")

    @field_validator("service_type_code", "full_name", "shop_name", "tel", "status_code", "payment_status_code")
    @classmethod
    def not_cleared(cls, v: Any, info: ValidationInfo) -> Any:
        if v is None:
            raise _rule_error("{key} is required", key=to_camel(info.field_name))
        return v

    @field_validator("shipping_name", "shipping_tel", "shipping_address")
    @classmethod
    def shipping_kept(cls, v: str | None, info: ValidationInfo) -> str | None:
        service_type = cls._service_type(info)
        if v is None and service_type is not None and service_type.requires_shipping:
            raise _rule_error("{key} is required", key=to_camel(info.field_name))
        return v

    @field_validator("theme_code")
    @classmethod
    def theme_kept(cls, v: str | None, info: ValidationInfo) -> str | None:
        service_type = cls._service_type(info)
        if v is None and service_type is not None and service_type.requires_design:
            raise _rule_error("themeCode is required")
        return v

    @field_validator("color_codes")
    @classmethod
    def color_count(cls, v: list[str] | None, info: ValidationInfo) -> list[str] | None:
        service_type = cls._service_type(info)
        if service_type is not None and service_type.requires_design:
            return _check_color_count(v)
        return v


# -------- Results --------


class FieldError(BaseModel):
    """
    One validation failure.

    `path` points at the offending field in the submitted payload, using
    `items[2].quantity` style for repeated item sub-forms.
    """

    model_config = ConfigDict(frozen=True)

    path: str
    message: str


class SubmissionResult(BaseModel):
    """
    Outcome of a successful submit.

    `warning` is set when the order row was created but its item rows were
    not; the id is still returned so the caller can retry or alert.
    """

    id: int
    warning: str | None = None

    @property
    def partial(self) -> bool:
        return self.warning is not None


class OrderCreated(BaseModel):
    """Response body for a fully created order."""

    id: int


class OrderPartiallyCreated(BaseModel):
    """Response body (HTTP 207) when the items could not be saved."""

    id: int
    warning: str


class OrderQuery(CamelModel):
    """
    Back-office order list filters.

    `q` matches order code, customer name and shipping name.
    """

    q: str | None = None
    status_code: str | None = None
    payment_status_code: str | None = None
    service_type_code: str | None = None
    page: int = Field(default=1, ge=1)
    size: int = Field(default=10, ge=1, le=100)


class Pagination(BaseModel):
    page: int
    size: int
    total: int
    pages: int


class OrderPage(BaseModel):
    """Paginated order listing (orders without items)."""

    data: list[OrderRecord]
    pagination: Pagination
