"""
Tests for the operation builders.

Run with: python -m pytest tests/ -v
"""

from datetime import datetime

import pytest

from logistics import (
    CancelCvsOrder,
    CreateCvsOrder,
    CreateHomeOrder,
    GetStoreList,
    OpenStoreMap,
    PrintCvsDocument,
    PrintTradeDocument,
    QueryLogisticsOrder,
    ReturnCvsOrder,
    ReturnHomeOrder,
    UpdateCvsOrder,
)
from shared.constants import LogisticsSubType
from shared.errors import IncompatibleVariantError, PreconditionError, ValidationError
from tests.conftest import HASH_IV, HASH_KEY, MERCHANT_ID


REPLY_URL = "https://shop.example.com/logistics/notify"


def full_store_map():
    return (
        OpenStoreMap(MERCHANT_ID, HASH_KEY, HASH_IV)
        .set_merchant_trade_no("MAP0001")
        .set_server_reply_url(REPLY_URL)
    )


def full_cvs_create():
    return (
        CreateCvsOrder(MERCHANT_ID, HASH_KEY, HASH_IV)
        .set_merchant_trade_no("CVS0001")
        .set_goods_name("Sneakers")
        .set_goods_amount(1200)
        .set_sender_name("Sender")
        .set_sender_cell_phone("0911222333")
        .set_receiver_name("Receiver")
        .set_receiver_cell_phone("0933222111")
        .set_receiver_store_id("131386")
        .set_server_reply_url(REPLY_URL)
    )


def full_cvs_update():
    return (
        UpdateCvsOrder(MERCHANT_ID, HASH_KEY, HASH_IV)
        .set_all_pay_logistics_id("1718546")
        .set_logistics_sub_type(LogisticsSubType.UNIMART_C2C)
        .set_shipment_date("2024/02/01")
    )


def full_cvs_cancel():
    return (
        CancelCvsOrder(MERCHANT_ID, HASH_KEY, HASH_IV)
        .set_all_pay_logistics_id("1718546")
        .set_cvs_payment_no("F0011750")
        .set_cvs_validation_no("7006")
    )


def full_cvs_return():
    return (
        ReturnCvsOrder(MERCHANT_ID, HASH_KEY, HASH_IV)
        .set_all_pay_logistics_id("1718546")
        .use_fami_b2c()
        .set_server_reply_url(REPLY_URL)
    )


def full_home_create():
    return (
        CreateHomeOrder(MERCHANT_ID, HASH_KEY, HASH_IV)
        .set_merchant_trade_no("HOME0001")
        .set_goods_name("Rice cooker")
        .set_sender_name("Sender")
        .set_sender_phone("0223456789")
        .set_sender_zip_code("110")
        .set_sender_address("Taipei Xinyi Rd 1")
        .set_receiver_name("Receiver")
        .set_receiver_cell_phone("0933222111")
        .set_receiver_zip_code("300")
        .set_receiver_address("Hsinchu Guangfu Rd 2")
        .set_server_reply_url(REPLY_URL)
    )


def full_home_return():
    return (
        ReturnHomeOrder(MERCHANT_ID, HASH_KEY, HASH_IV)
        .set_all_pay_logistics_id("1718546")
        .set_sender_name("Receiver")
        .set_sender_cell_phone("0933222111")
        .set_sender_zip_code("300")
        .set_sender_address("Hsinchu Guangfu Rd 2")
        .set_receiver_name("Shop")
        .set_receiver_phone("0223456789")
        .set_receiver_zip_code("110")
        .set_receiver_address("Taipei Xinyi Rd 1")
        .set_server_reply_url(REPLY_URL)
    )


def full_order_query():
    return QueryLogisticsOrder(MERCHANT_ID, HASH_KEY, HASH_IV).set_all_pay_logistics_id("1718546")


def full_store_list():
    return GetStoreList(MERCHANT_ID, HASH_KEY, HASH_IV).search_unimart().by_keyword("Xinyi")


def full_print_trade():
    return PrintTradeDocument(MERCHANT_ID, HASH_KEY, HASH_IV).set_all_pay_logistics_id("1718546")


def full_print_unimart():
    return PrintCvsDocument(MERCHANT_ID, HASH_KEY, HASH_IV).for_unimart("F0011750", "7006")


def full_print_fami():
    return (
        PrintCvsDocument(MERCHANT_ID, HASH_KEY, HASH_IV)
        .use_fami_c2c()
        .set_all_pay_logistics_id("1718546")
    )


BUILDERS = {
    "store_map": full_store_map,
    "cvs_create": full_cvs_create,
    "cvs_update": full_cvs_update,
    "cvs_cancel": full_cvs_cancel,
    "cvs_return": full_cvs_return,
    "home_create": full_home_create,
    "home_return": full_home_return,
    "order_query": full_order_query,
    "store_list": full_store_list,
    "print_trade": full_print_trade,
    "print_unimart": full_print_unimart,
    "print_fami": full_print_fami,
}

REQUIRED = {
    "store_map": OpenStoreMap.REQUIRED_FIELDS,
    "cvs_create": CreateCvsOrder.REQUIRED_FIELDS,
    "cvs_update": UpdateCvsOrder.REQUIRED_FIELDS,
    "cvs_cancel": CancelCvsOrder.REQUIRED_FIELDS,
    "cvs_return": ReturnCvsOrder.REQUIRED_FIELDS,
    "home_create": CreateHomeOrder.REQUIRED_FIELDS,
    "home_return": ReturnHomeOrder.REQUIRED_FIELDS,
    "order_query": QueryLogisticsOrder.REQUIRED_FIELDS,
    "store_list": GetStoreList.REQUIRED_FIELDS,
    "print_trade": PrintTradeDocument.REQUIRED_FIELDS,
    "print_unimart": ("LogisticsSubType", "CVSPaymentNo", "CVSValidationNo"),
    "print_fami": ("LogisticsSubType", "AllPayLogisticsID"),
}

REMOVAL_CASES = [
    (name, required)
    for name, fields in REQUIRED.items()
    for required in ("MerchantID",) + tuple(fields)
]


class TestRequiredFields:
    """Every required field is enforced, in order."""

    @pytest.mark.parametrize("name", sorted(BUILDERS))
    def test_complete_builder_validates(self, name):
        builder = BUILDERS[name]()

        assert builder.find_violation() is None
        builder.validate()

    @pytest.mark.parametrize("name,required", REMOVAL_CASES)
    def test_missing_field_is_reported(self, name, required):
        builder = BUILDERS[name]()
        names = required if isinstance(required, tuple) else (required,)
        for field in names:
            builder._content.pop(field, None)

        violation = builder.find_violation()

        assert violation is not None
        assert violation.field == names[0]
        with pytest.raises(ValidationError) as exc:
            builder.validate()
        assert exc.value.field == names[0]

    def test_either_or_fields_accept_one(self):
        order = full_cvs_create().set_sender_phone("0223456789")
        order._content.pop("SenderCellPhone")

        assert order.find_violation() is None

    def test_either_or_violation_names_alternatives(self):
        order = full_cvs_create()
        order._content.pop("ReceiverCellPhone")

        violation = order.find_violation()

        assert violation.alternatives == ("ReceiverPhone", "ReceiverCellPhone")
        assert "ReceiverPhone" in violation.message
        assert "ReceiverCellPhone" in violation.message

    def test_first_violation_wins(self):
        order = CreateCvsOrder(MERCHANT_ID, HASH_KEY, HASH_IV)

        assert order.find_violation().field == "MerchantTradeNo"

    def test_missing_merchant_id(self):
        order = full_cvs_create().set_merchant_id("")

        with pytest.raises(ValidationError, match="MerchantID"):
            order.get_payload()

    def test_store_list_needs_a_filter(self):
        stores = GetStoreList(MERCHANT_ID, HASH_KEY, HASH_IV).search_fami()

        violation = stores.find_violation()

        assert violation.alternatives == ("Keyword", "ZipCode", "City")
        assert stores.by_city("Taipei").find_violation() is None


ALL_BUILDER_CLASSES = [
    OpenStoreMap,
    CreateCvsOrder,
    UpdateCvsOrder,
    CancelCvsOrder,
    ReturnCvsOrder,
    CreateHomeOrder,
    ReturnHomeOrder,
    QueryLogisticsOrder,
    GetStoreList,
    PrintTradeDocument,
    PrintCvsDocument,
]

INCOMPATIBLE_CASES = [
    (cls, sub_type)
    for cls in ALL_BUILDER_CLASSES
    for sub_type in LogisticsSubType
    if sub_type not in cls.ALLOWED_SUB_TYPES
]


class TestSubTypeCompatibility:
    """Sub-types an operation cannot carry are rejected on assignment."""

    @pytest.mark.parametrize("cls,sub_type", INCOMPATIBLE_CASES)
    def test_incompatible_sub_type(self, cls, sub_type):
        builder = cls(MERCHANT_ID, HASH_KEY, HASH_IV)

        with pytest.raises(IncompatibleVariantError) as exc:
            builder.set_logistics_sub_type(sub_type)

        assert exc.value.field == "LogisticsSubType"
        assert exc.value.sub_type == sub_type.value
        assert exc.value.allowed == tuple(sorted(s.value for s in cls.ALLOWED_SUB_TYPES))

    def test_allowed_sets(self):
        assert CancelCvsOrder.ALLOWED_SUB_TYPES == {LogisticsSubType.UNIMART_C2C}
        assert ReturnHomeOrder.ALLOWED_SUB_TYPES == {LogisticsSubType.TCAT}
        assert CreateHomeOrder.ALLOWED_SUB_TYPES == {LogisticsSubType.TCAT, LogisticsSubType.POST}
        assert ReturnCvsOrder.ALLOWED_SUB_TYPES == {
            LogisticsSubType.UNIMART, LogisticsSubType.FAMI, LogisticsSubType.HILIFE,
        }
        assert QueryLogisticsOrder.ALLOWED_SUB_TYPES == frozenset()
        assert not any(s.is_c2c for s in PrintTradeDocument.ALLOWED_SUB_TYPES)
        assert all(s.is_c2c for s in PrintCvsDocument.ALLOWED_SUB_TYPES)

    def test_wire_string_accepted(self):
        order = CreateCvsOrder(MERCHANT_ID, HASH_KEY, HASH_IV).set_logistics_sub_type("FAMIC2C")

        assert order.sub_type is LogisticsSubType.FAMI_C2C
        assert order.get("LogisticsSubType") == "FAMIC2C"

    def test_unknown_string_rejected(self):
        order = CreateCvsOrder(MERCHANT_ID, HASH_KEY, HASH_IV)

        with pytest.raises(IncompatibleVariantError) as exc:
            order.set_logistics_sub_type("SEVEN")

        assert exc.value.sub_type == "SEVEN"

    def test_rejected_assignment_keeps_previous_sub_type(self):
        order = CreateHomeOrder(MERCHANT_ID, HASH_KEY, HASH_IV)

        with pytest.raises(IncompatibleVariantError):
            order.set_logistics_sub_type(LogisticsSubType.FAMI)

        assert order.sub_type is LogisticsSubType.TCAT

    def test_error_is_a_validation_error(self):
        with pytest.raises(ValidationError):
            ReturnHomeOrder(MERCHANT_ID, HASH_KEY, HASH_IV).set_logistics_sub_type("POST")


class TestRouting:
    """Request paths per variant."""

    @pytest.mark.parametrize("sub_type,path", [
        (LogisticsSubType.UNIMART, "/Express/ReturnUniMartCVS"),
        (LogisticsSubType.FAMI, "/Express/ReturnCVS"),
        (LogisticsSubType.HILIFE, "/Express/ReturnHiLifeCVS"),
    ])
    def test_cvs_return_routes(self, sub_type, path):
        order = ReturnCvsOrder(MERCHANT_ID, HASH_KEY, HASH_IV).set_logistics_sub_type(sub_type)

        assert order.request_path == path

    @pytest.mark.parametrize("sub_type,path", [
        (LogisticsSubType.UNIMART_C2C, "/Express/PrintUniMartC2COrderInfo"),
        (LogisticsSubType.FAMI_C2C, "/Express/PrintFAMIC2COrderInfo"),
        (LogisticsSubType.HILIFE_C2C, "/Express/PrintHILIFEC2COrderInfo"),
        (LogisticsSubType.OKMART_C2C, "/Express/PrintOKMARTC2COrderInfo"),
    ])
    def test_cvs_print_routes(self, sub_type, path):
        document = PrintCvsDocument(MERCHANT_ID, HASH_KEY, HASH_IV).set_logistics_sub_type(sub_type)

        assert document.request_path == path

    def test_routed_path_needs_sub_type(self):
        with pytest.raises(ValidationError, match="LogisticsSubType"):
            ReturnCvsOrder(MERCHANT_ID, HASH_KEY, HASH_IV).request_path

    def test_fixed_paths(self):
        assert full_store_map().request_path == "/Express/map"
        assert full_cvs_create().request_path == "/Express/Create"
        assert full_cvs_update().request_path == "/Helper/UpdateShipmentInfo"
        assert full_cvs_cancel().request_path == "/Express/CancelC2COrder"
        assert full_home_create().request_path == "/Express/Create"
        assert full_home_return().request_path == "/Express/ReturnHome"
        assert full_order_query().request_path == "/Helper/QueryLogisticsTradeInfo/V4"
        assert full_store_list().request_path == "/Express/GetStoreList"
        assert full_print_trade().request_path == "/helper/printTradeDocument"


class TestDefaults:
    """Variant defaults."""

    def test_cvs_create_defaults(self):
        payload = CreateCvsOrder(MERCHANT_ID, HASH_KEY, HASH_IV)

        assert payload.get("MerchantID") == MERCHANT_ID
        assert payload.get("LogisticsType") == "CVS"
        assert payload.get("LogisticsSubType") == "UNIMARTC2C"
        assert payload.get("GoodsAmount") == 0
        assert payload.get("IsCollection") == "N"
        datetime.strptime(payload.get("MerchantTradeDate"), "%Y/%m/%d %H:%M:%S")

    def test_home_create_defaults(self):
        order = CreateHomeOrder(MERCHANT_ID, HASH_KEY, HASH_IV)

        assert order.get("LogisticsType") == "Home"
        assert order.get("LogisticsSubType") == "TCAT"
        assert order.get("GoodsAmount") == 0
        assert order.get("IsCollection") == "N"
        assert order.get("Temperature") == "0001"
        assert order.get("Distance") == "00"
        assert order.get("Specification") == "0001"
        assert order.get("ScheduledPickupTime") == "4"
        assert order.get("ScheduledDeliveryTime") == "4"

    def test_home_return_defaults(self):
        order = ReturnHomeOrder(MERCHANT_ID, HASH_KEY, HASH_IV)

        assert order.get("LogisticsSubType") == "TCAT"
        assert order.get("GoodsAmount") == 0
        assert order.get("Temperature") == "0001"
        assert order.get("ScheduledPickupTime") == "4"

    def test_store_map_defaults(self):
        store_map = OpenStoreMap(MERCHANT_ID, HASH_KEY, HASH_IV)

        assert store_map.get("LogisticsType") == "CVS"
        assert store_map.get("LogisticsSubType") == "UNIMARTC2C"
        assert store_map.get("IsCollection") == "N"
        assert store_map.get("Device") == 0

    def test_cvs_return_default_amount(self):
        assert ReturnCvsOrder(MERCHANT_ID, HASH_KEY, HASH_IV).get("GoodsAmount") == 0

    def test_store_list_default_store_type(self):
        assert GetStoreList(MERCHANT_ID, HASH_KEY, HASH_IV).get("StoreType") == "01"

    def test_order_query_time_stamp(self):
        import time

        stamp = QueryLogisticsOrder(MERCHANT_ID, HASH_KEY, HASH_IV).get("TimeStamp")

        assert isinstance(stamp, int)
        assert abs(stamp - int(time.time())) < 60

    def test_cancel_does_not_emit_sub_type(self):
        order = full_cvs_cancel()

        assert order.sub_type is LogisticsSubType.UNIMART_C2C
        assert "LogisticsSubType" not in order.get_payload()


class TestSetters:
    """Setter-level checks and conversions."""

    def test_trade_no_limit(self):
        order = CreateCvsOrder(MERCHANT_ID, HASH_KEY, HASH_IV)
        order.set_merchant_trade_no("A" * 20)

        with pytest.raises(ValidationError, match="MerchantTradeNo"):
            order.set_merchant_trade_no("A" * 21)

    def test_trade_no_counts_characters(self):
        # 20 multi-byte characters are still 20 characters
        order = CreateCvsOrder(MERCHANT_ID, HASH_KEY, HASH_IV).set_merchant_trade_no("單" * 20)

        assert order.get("MerchantTradeNo") == "單" * 20

    def test_goods_name_limit(self):
        order = CreateHomeOrder(MERCHANT_ID, HASH_KEY, HASH_IV)
        order.set_goods_name("商" * 50)

        with pytest.raises(ValidationError, match="GoodsName"):
            order.set_goods_name("商" * 51)

    def test_cvs_person_name_limit(self):
        order = CreateCvsOrder(MERCHANT_ID, HASH_KEY, HASH_IV)
        order.set_sender_name("王" * 10)

        with pytest.raises(ValidationError, match="SenderName"):
            order.set_sender_name("王" * 11)
        with pytest.raises(ValidationError, match="ReceiverName"):
            order.set_receiver_name("R" * 11)

    def test_home_person_name_not_limited(self):
        order = CreateHomeOrder(MERCHANT_ID, HASH_KEY, HASH_IV).set_sender_name("S" * 11)

        assert order.get("SenderName") == "S" * 11

    @pytest.mark.parametrize("setter", ["set_goods_amount", "set_collection_amount"])
    def test_negative_amounts(self, setter):
        order = CreateCvsOrder(MERCHANT_ID, HASH_KEY, HASH_IV)

        with pytest.raises(ValidationError, match="must not be negative"):
            getattr(order, setter)(-1)

    def test_trade_date_from_datetime(self):
        order = CreateCvsOrder(MERCHANT_ID, HASH_KEY, HASH_IV)
        order.set_merchant_trade_date(datetime(2024, 1, 31, 13, 5, 0))

        assert order.get("MerchantTradeDate") == "2024/01/31 13:05:00"

    def test_shipment_date_from_date(self):
        from datetime import date

        order = UpdateCvsOrder(MERCHANT_ID, HASH_KEY, HASH_IV).set_shipment_date(date(2024, 2, 1))

        assert order.get("ShipmentDate") == "2024/02/01"

    def test_platform_id_only_when_set(self):
        order = CreateCvsOrder(MERCHANT_ID, HASH_KEY, HASH_IV)
        order.set_platform_id("")
        assert order.get("PlatformID") is None

        order.set_platform_id("3085340")
        assert order.get("PlatformID") == "3085340"

    def test_server_url_strips_trailing_slash(self):
        order = full_store_map().set_server_url("https://logistics.ecpay.com.tw/")

        assert order.url == "https://logistics.ecpay.com.tw/Express/map"

    def test_with_collection(self):
        order = CreateCvsOrder(MERCHANT_ID, HASH_KEY, HASH_IV).with_collection(500)

        assert order.get("IsCollection") == "Y"
        assert order.get("CollectionAmount") == 500

        order.without_collection()
        assert order.get("IsCollection") == "N"

    def test_home_shortcuts(self):
        order = CreateHomeOrder(MERCHANT_ID, HASH_KEY, HASH_IV).use_post().refrigeration().island()

        assert order.get("LogisticsSubType") == "POST"
        assert order.get("Temperature") == "0002"
        assert order.get("Distance") == "02"

    def test_enum_setter_rejects_unknown_value(self):
        with pytest.raises(ValueError):
            CreateHomeOrder(MERCHANT_ID, HASH_KEY, HASH_IV).set_temperature("0009")

    def test_store_map_device(self):
        store_map = OpenStoreMap(MERCHANT_ID, HASH_KEY, HASH_IV).use_mobile_device()

        assert store_map.get("Device") == 1

    def test_print_trade_multiple_ids(self):
        document = (
            PrintTradeDocument(MERCHANT_ID, HASH_KEY, HASH_IV)
            .set_all_pay_logistics_ids(["1001", "1002"])
            .add_logistics_id("1003")
        )

        assert document.get("AllPayLogisticsID") == "1001,1002,1003"

    def test_print_cvs_multiple_numbers(self):
        document = (
            PrintCvsDocument(MERCHANT_ID, HASH_KEY, HASH_IV)
            .use_unimart_c2c()
            .set_cvs_payment_nos(["F001", "F002"])
            .set_cvs_validation_nos(["1111", "2222"])
        )

        assert document.get("CVSPaymentNo") == "F001,F002"
        assert document.get("CVSValidationNo") == "1111,2222"
        assert document.find_violation() is None


class TestSigning:
    """Signing, freezing and output."""

    def test_get_content_signs(self, encoder):
        content = full_cvs_create().get_content()

        assert list(content)[-1] == "CheckMacValue"
        assert encoder.verify_response(content)

    def test_get_payload_is_unsigned(self):
        assert "CheckMacValue" not in full_cvs_create().get_payload()

    def test_signed_builder_is_frozen(self):
        order = full_cvs_create()
        order.get_content()

        assert order.is_signed
        with pytest.raises(PreconditionError):
            order.set_goods_name("Changed")
        with pytest.raises(PreconditionError):
            order.set_logistics_sub_type(LogisticsSubType.FAMI_C2C)
        with pytest.raises(PreconditionError):
            order.set_hash_key("other")

    def test_get_content_is_stable(self):
        order = full_home_create()

        assert order.get_content() == order.get_content()

    def test_invalid_builder_is_not_signed(self):
        order = CreateCvsOrder(MERCHANT_ID, HASH_KEY, HASH_IV)

        with pytest.raises(ValidationError):
            order.get_content()
        assert not order.is_signed
        order.set_merchant_trade_no("STILL_MUTABLE")

    def test_missing_secrets(self):
        order = CreateCvsOrder(MERCHANT_ID)
        order._content.update(full_cvs_create()._content)

        with pytest.raises(PreconditionError):
            order.get_content()

    def test_custom_encoder(self):
        from shared.checkmac import CheckMacEncoder

        other = CheckMacEncoder("another_hash_key", "another_hash_iv")
        content = full_store_map().set_encoder(other).get_content()

        assert other.verify_response(content)

    def test_to_form(self):
        form = full_store_map().to_form()

        assert form["action"] == "https://logistics-stage.ecpay.com.tw/Express/map"
        assert form["fields"]["MerchantTradeNo"] == "MAP0001"
        assert "CheckMacValue" in form["fields"]

    def test_send_posts_signed_content(self):
        from logistics.response import Response

        class RecordingClient:
            def post(self, path, payload, encoder=None):
                self.path = path
                self.payload = payload
                return Response("RtnCode=300&RtnMsg=OK", encoder)

        client = RecordingClient()
        order = full_cvs_return()

        response = order.send(client)

        assert client.path == "/Express/ReturnCVS"
        assert client.payload == order.get_content()
        assert response.is_success()
