import json

from printorder.models.order import Order, OrderItem, ServiceType
from printorder.services.row_mapper import (
    item_from_row,
    item_to_row,
    items_to_rows,
    order_from_row,
    order_to_row,
    patch_to_row,
    record_from_row,
)


def _design_order(**overrides) -> Order:
    data = dict(
        full_name="สมชาย ใจดี",
        shop_name="ร้านทดสอบ",
        tel="0812345678",
        line="testline",
        service_type_code=ServiceType.DESIGN_AND_PRODUCTION,
        shipping_name="สมชาย",
        shipping_tel="0812345678",
        shipping_address="กรุงเทพ",
        theme_code="MINIMAL",
        color_codes=["RED", "BLACK", "GOLD"],
        design_info_text="Logo top left",
        items=[
            OrderItem(
                product_code="OTHER",
                product_other="Sticker sheet",
                size_code="CUSTOM",
                size_width=12.5,
                size_height=8,
                orientation_code="LANDSCAPE",
                coating_code="MATTE",
                page_option_code="DOUBLE",
                image_option_code="NO",
                brand_option_code="LOGO",
                quantity=200,
            )
        ],
    )
    data.update(overrides)
    return Order(**data)


def _round_trip(order: Order) -> Order:
    row = order_to_row(order)
    item_rows = items_to_rows(order.items, order_id=1)
    return order_from_row(row, item_rows)


# ---------- Round trip ----------


def test_round_trip_keeps_every_mapped_field():
    order = _design_order()

    restored = _round_trip(order)

    assert restored.model_dump() == order.model_dump()


def test_round_trip_keeps_nulls_as_nulls():
    order = _design_order(
        email=None,
        facebook=None,
        shipping_name=None,
        shipping_tel=None,
        shipping_address=None,
        theme_code=None,
        color_codes=None,
        design_info_text=None,
        service_type_code=ServiceType.DESIGN_ONLY,
    )

    restored = _round_trip(order)

    assert restored.model_dump() == order.model_dump()
    assert restored.shipping_address is None


def test_round_trip_keeps_color_order():
    order = _design_order(color_codes=["GOLD", "RED", "BLACK"])

    assert _round_trip(order).color_codes == ["GOLD", "RED", "BLACK"]


def test_round_trip_drops_brief_whitespace():
    order = _design_order(design_info_text="  centred  ")

    assert _round_trip(order).design_info_text == "centred"


# ---------- Write side ----------


def test_order_row_uses_storage_columns():
    row = order_to_row(_design_order())

    assert row["mood_tone"] == json.dumps(["RED", "BLACK", "GOLD"])
    assert row["brief"] == "Logo top left"
    assert row["service_type_code"] == "DESIGN_AND_PRODUCTION"
    assert "color_codes" not in row
    assert "items" not in row


def test_thai_text_in_colors_is_not_escaped():
    row = order_to_row(_design_order(color_codes=["แดง"]))

    assert row["mood_tone"] == '["แดง"]'


def test_empty_colors_are_stored_as_null():
    assert order_to_row(_design_order(color_codes=[]))["mood_tone"] is None


def test_blank_brief_and_empty_strings_are_stored_as_null():
    row = order_to_row(_design_order(design_info_text="   ", email=""))

    assert row["brief"] is None
    assert row["email"] is None


def test_item_row_uses_storage_columns_and_parent_id():
    item = _design_order().items[0]

    row = item_to_row(item, order_id=42)

    assert row == {
        "item_type_code": "OTHER",
        "item_type_other": "Sticker sheet",
        "size_code": "CUSTOM",
        "width": 12.5,
        "height": 8.0,
        "layout_code": "LANDSCAPE",
        "texture_code": "MATTE",
        "side_code": "DOUBLE",
        "image_code": "NO",
        "decorate_code": "LOGO",
        "quantity": 200,
        "order_id": 42,
    }


def test_blank_item_stubs_are_filtered():
    items = [OrderItem(), OrderItem(product_code="POSTER"), OrderItem(size_code="")]

    rows = items_to_rows(items, order_id=3)

    assert len(rows) == 1
    assert rows[0]["item_type_code"] == "POSTER"


def test_order_row_holds_only_mapped_columns():
    row = order_to_row(_design_order())

    assert set(row) == {
        "full_name",
        "shop_name",
        "tel",
        "email",
        "facebook",
        "line",
        "service_type_code",
        "shipping_name",
        "shipping_tel",
        "shipping_address",
        "theme_code",
        "mood_tone",
        "brief",
    }


def test_patch_row_contains_only_patched_columns():
    row = patch_to_row({"theme_code": "MODERN", "color_codes": ["RED"], "items": []})

    assert row == {"theme_code": "MODERN", "mood_tone": '["RED"]'}


def test_patch_row_maps_back_office_fields():
    row = patch_to_row({"status_code": "DONE", "designer_owner_id": 5})

    assert row == {"status_code": "DONE", "designer_owner_id": 5}


# ---------- Read side ----------


def test_legacy_keys_are_read():
    row = {
        "fullName": "Legacy Name",
        "shopName": "Legacy Shop",
        "tel": "0812345678",
        "serviceTypeCode": "DESIGN_ONLY",
        "themeCode": "RETRO",
        "color_codes": ["RED"],
        "design_info_text": "old brief",
    }

    order = order_from_row(row)

    assert order.full_name == "Legacy Name"
    assert order.shop_name == "Legacy Shop"
    assert order.service_type_code is ServiceType.DESIGN_ONLY
    assert order.theme_code == "RETRO"
    assert order.color_codes == ["RED"]
    assert order.design_info_text == "old brief"


def test_canonical_column_wins_over_legacy_key():
    row = {"theme_code": "NEW", "themeCode": "OLD", "mood_tone": '["A"]', "colorCodes": ["B"]}

    order = order_from_row(row)

    assert order.theme_code == "NEW"
    assert order.color_codes == ["A"]


def test_null_canonical_column_falls_back_to_legacy_key():
    order = order_from_row({"theme_code": None, "themeCode": "OLD"})

    assert order.theme_code == "OLD"


def test_legacy_item_keys_are_read():
    item = item_from_row({"product_code": "POSTER", "sizeWidth": 10, "layoutCode": "PORTRAIT"})

    assert item.product_code == "POSTER"
    assert item.size_width == 10
    assert item.orientation_code == "PORTRAIT"


def test_malformed_mood_tone_reads_as_null():
    order = order_from_row({"mood_tone": "RED, BLUE"})

    assert order.color_codes is None


def test_non_list_mood_tone_reads_as_null():
    assert order_from_row({"mood_tone": '{"a": 1}'}).color_codes is None


def test_missing_required_text_reads_as_empty_string():
    order = order_from_row({})

    assert order.full_name == ""
    assert order.tel == ""
    assert order.items == []


def test_unknown_service_type_is_kept_raw():
    assert order_from_row({"service_type_code": "LEGACY"}).service_type_code == "LEGACY"


def test_record_carries_back_office_fields():
    row = {
        "id": 9,
        "code": None,
        "full_name": "A",
        "status_code": "PENDING",
        "payment_status_code": "UNPAID",
        "designer_owner_id": 3,
        "created_date": "2024-05-01T10:00:00Z",
    }

    record = record_from_row(row, [{"item_type_code": "POSTER", "order_id": 9}])

    assert record.id == 9
    assert record.code == "ORD-9"
    assert record.status_code == "PENDING"
    assert record.designer_owner_id == 3
    assert record.created_at.year == 2024
    assert record.created_at.utcoffset().total_seconds() == 0
    assert record.updated_at is None
    assert record.items[0].product_code == "POSTER"


def test_record_keeps_stored_code():
    assert record_from_row({"id": 1, "code": "PO-0001"}).code == "PO-0001"
