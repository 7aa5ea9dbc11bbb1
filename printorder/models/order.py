# printorder/models/order.py
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

# Sentinel master codes that switch on extra item fields.
PRODUCT_OTHER = "OTHER"
SIZE_CUSTOM = "CUSTOM"

# Codes assigned to every freshly submitted order.
INITIAL_STATUS_CODE = "PENDING"
INITIAL_PAYMENT_STATUS_CODE = "PENDING"


class ServiceType(str, Enum):
    """
    What the customer asks the shop to do.

    Drives which parts of the order form are required:
      - DESIGN_ONLY           -> theme, colors, design items
      - PRODUCTION_ONLY       -> shipping details
      - DESIGN_AND_PRODUCTION -> both
    """

    DESIGN_ONLY = "DESIGN_ONLY"
    PRODUCTION_ONLY = "PRODUCTION_ONLY"
    DESIGN_AND_PRODUCTION = "DESIGN_AND_PRODUCTION"

    @property
    def requires_design(self) -> bool:
        return self in (ServiceType.DESIGN_ONLY, ServiceType.DESIGN_AND_PRODUCTION)

    @property
    def requires_shipping(self) -> bool:
        return self in (ServiceType.PRODUCTION_ONLY, ServiceType.DESIGN_AND_PRODUCTION)


class CamelModel(BaseModel):
    """
    Base for domain models.

    Attributes are snake_case in Python and camelCase on the wire
    (`full_name` <-> `fullName`); both spellings are accepted on input.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class OrderItem(CamelModel):
    """
    One printed artifact inside an order.

    `product_other` only matters when product_code == OTHER and
    `size_width` / `size_height` only when size_code == CUSTOM.
    """

    product_code: str | None = None
    product_other: str | None = None
    size_code: str | None = None
    size_width: float | None = None
    size_height: float | None = None
    orientation_code: str | None = None
    coating_code: str | None = None
    page_option_code: str | None = None
    image_option_code: str | None = None
    brand_option_code: str | None = None
    quantity: int | None = None


class Order(CamelModel):
    """
    Customer print order in its domain (validated) form.

    Contact:
      - tel is always required
      - at least one of facebook / line is required

    Built by OrderValidator from a raw submission, or rebuilt from storage
    rows by the row mapper. Has no id of its own; see OrderRecord.
    """

    full_name: str
    shop_name: str
    tel: str
    email: str | None = None
    facebook: str | None = None
    line: str | None = None
    service_type_code: ServiceType
    shipping_name: str | None = None
    shipping_tel: str | None = None
    shipping_address: str | None = None
    theme_code: str | None = None
    color_codes: list[str] | None = None
    design_info_text: str | None = None
    items: list[OrderItem] = []


class OrderRecord(Order):
    """
    A stored order: the domain order plus what the database and back office
    attach to it (id, display code, workflow status, owner, timestamps).
    """

    id: int
    code: str
    status_code: str | None = None
    payment_status_code: str | None = None
    designer_owner_id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
