# printorder/services/order_validator.py
"""
Validation of raw order submissions.

The rules live on the request schemas in printorder.schemas.order; this
module runs them and turns pydantic's error list into FieldError(path,
message) entries so a form can show every problem at once. Nothing in this
module raises for bad input.

serviceTypeCode selects the submission schema. When it is missing or
unknown, only the fields common to every service type are checked.
"""
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, TypeAdapter, ValidationError

from printorder.models.order import Order, OrderItem, ServiceType
from printorder.schemas.order import (
    CONTACT_REQUIRED,
    DESIGN_ITEM_REQUIRED,
    ORDER_RULE,
    DesignItemSubmission,
    FieldError,
    OrderItemSubmission,
    OrderSubmission,
    OrderSubmissionBase,
    OrderUpdate,
)

_submission_adapter = TypeAdapter(OrderSubmission)
_design_items_adapter = TypeAdapter(list[DesignItemSubmission])
_plain_items_adapter = TypeAdapter(list[OrderItemSubmission])

_TAG_ERRORS = {"union_tag_invalid", "union_tag_not_found"}
_SERVICE_TYPES = {t.value for t in ServiceType}

# Messages for a value that is present but malformed, by camelCase key.
_INVALID_MESSAGES = {
    "tel": "tel must be 9-10 digits starting with 0",
    "shippingTel": "shippingTel must be 9-10 digits starting with 0",
    "email": "email must be a valid email address",
    "quantity": "quantity must be a positive integer",
    "sizeWidth": "sizeWidth must be a positive number",
    "sizeHeight": "sizeHeight must be a positive number",
    "designerOwnerId": "designerOwnerId must be a positive integer",
    "serviceTypeCode": "serviceTypeCode must be one of: " + ", ".join(t.value for t in ServiceType),
    "colorCodes": "colorCodes must be a list of strings",
    "items": "items must be a list",
}

# Messages for a bad entry inside a list, by the list's key.
_ELEMENT_MESSAGES = {
    "colorCodes": "color code must be a non-empty string",
    "items": "item must be an object",
}


class ValidationResult(BaseModel):
    """Either a validated `order` or a non-empty list of `errors`."""

    order: Order | None = None
    errors: list[FieldError] = []

    @property
    def ok(self) -> bool:
        return not self.errors


class PartialValidationResult(BaseModel):
    """
    Validated subset of an order for updates.

    `patch` maps domain field names to normalized values, holding only the
    fields present in the input.
    """

    patch: dict[str, Any] = {}
    errors: list[FieldError] = []

    @property
    def ok(self) -> bool:
        return not self.errors


def is_blank(value: Any) -> bool:
    """Absent, None and whitespace-only strings all count as 'not provided'."""
    return value is None or (isinstance(value, str) and value.strip() == "")


def _path(loc: tuple) -> str:
    path = ""
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        else:
            path = f"{path}.{part}" if path else str(part)
    return path


def _message(err: dict[str, Any], loc: tuple) -> str:
    names = [p for p in loc if isinstance(p, str)]
    key = names[-1] if names else ""
    err_type = err["type"]

    if err_type == ORDER_RULE:
        return err["msg"]
    if loc and isinstance(loc[-1], int):
        return _ELEMENT_MESSAGES.get(key, f"{key} entry is invalid")
    if err_type == "missing" or err.get("input", "") is None:
        return f"{key} is required"
    if key in _INVALID_MESSAGES:
        return _INVALID_MESSAGES[key]
    if err_type == "string_too_long":
        return f"{key} must be at most {err['ctx']['max_length']} characters"
    if err_type == "string_type":
        return f"{key} must be a string"
    return f"{key}: {err['msg']}"


def to_field_errors(exc: ValidationError, prefix: tuple = ()) -> list[FieldError]:
    """
    Flatten a pydantic ValidationError into FieldErrors.

    Locations become `items[2].quantity` style paths. A leading
    discriminator tag (the service type) is dropped from each location.
    """
    errors: list[FieldError] = []
    for err in exc.errors():
        loc = tuple(err["loc"])
        if loc and loc[0] in _SERVICE_TYPES:
            loc = loc[1:]
        loc = prefix + loc
        errors.append(FieldError(path=_path(loc), message=_message(err, loc)))
    return errors


def _service_type_error(raw: Mapping[str, Any]) -> FieldError:
    if is_blank(raw.get("serviceTypeCode")):
        return FieldError(path="serviceTypeCode", message="serviceTypeCode is required")
    return FieldError(path="serviceTypeCode", message=_INVALID_MESSAGES["serviceTypeCode"])


def _as_service_type(value: Any) -> ServiceType | None:
    try:
        return ServiceType(value)
    except (ValueError, TypeError):
        return None


class OrderValidator:
    """
    Validates raw order payloads (camelCase keys, as posted by the form).

    Rules:
      - fullName, shopName, tel and serviceTypeCode are always required
      - facebook or line is required
      - PRODUCTION_ONLY / DESIGN_AND_PRODUCTION need shippingName,
        shippingTel and shippingAddress
      - DESIGN_ONLY / DESIGN_AND_PRODUCTION need themeCode, 1-3 colorCodes
        and at least one fully specified item
      - design fields on a non-design order are ignored, not rejected
    """

    # ----- Public API -----

    def validate(self, raw: Any) -> ValidationResult:
        if not isinstance(raw, Mapping):
            return ValidationResult(
                errors=[FieldError(path="", message="payload must be an object")]
            )
        raw = dict(raw)

        try:
            submission = _submission_adapter.validate_python(raw)
        except ValidationError as exc:
            if not any(e["type"] in _TAG_ERRORS for e in exc.errors()):
                return ValidationResult(errors=to_field_errors(exc))
            # Conditional rules cannot be evaluated without a service type.
            errors = [_service_type_error(raw)]
            try:
                OrderSubmissionBase.model_validate(raw)
            except ValidationError as shape_exc:
                errors.extend(to_field_errors(shape_exc))
            return ValidationResult(errors=errors)

        return ValidationResult(order=submission.to_order())

    def validate_partial(
        self,
        raw: Any,
        stored_service_type: ServiceType | str | None = None,
    ) -> PartialValidationResult:
        """
        Validate only the fields present in an update payload.

        The same per-field rules as `validate` apply. Item rules follow the
        service type in the patch, falling back to the stored one.
        Back-office fields (statusCode, paymentStatusCode, designerOwnerId)
        are accepted here as well.
        """
        if not isinstance(raw, Mapping):
            return PartialValidationResult(
                errors=[FieldError(path="", message="payload must be an object")]
            )
        raw = dict(raw)

        if "serviceTypeCode" in raw:
            service_type = _as_service_type(raw["serviceTypeCode"])
        else:
            service_type = _as_service_type(stored_service_type)
        design = service_type is not None and service_type.requires_design

        errors: list[FieldError] = []
        update: OrderUpdate | None = None
        try:
            update = OrderUpdate.model_validate(raw, context={"service_type": service_type})
        except ValidationError as exc:
            errors.extend(to_field_errors(exc))

        # Contact rule, only when both channels are being changed.
        if "facebook" in raw and "line" in raw and is_blank(raw["facebook"]) and is_blank(raw["line"]):
            if not any(e.path in ("facebook", "line") for e in errors):
                errors.append(FieldError(path="facebook", message=CONTACT_REQUIRED))

        items: list[OrderItem] | None = None
        if update is not None and "items" in update.model_fields_set:
            raw_items = update.items or []
            adapter = _design_items_adapter if design else _plain_items_adapter
            try:
                parsed = adapter.validate_python(raw_items)
            except ValidationError as exc:
                errors.extend(to_field_errors(exc, prefix=("items",)))
            else:
                if design and not parsed:
                    errors.append(FieldError(path="items", message=DESIGN_ITEM_REQUIRED))
                items = [OrderItem.model_validate(it.model_dump()) for it in parsed]

        if errors:
            return PartialValidationResult(errors=errors)

        patch = update.model_dump(include=update.model_fields_set - {"items"})
        if items is not None:
            patch["items"] = items
        return PartialValidationResult(patch=patch)
