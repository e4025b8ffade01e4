"""
Convenience store (CVS) shipment operations.

    CreateCvsOrder   /Express/Create
    UpdateCvsOrder   /Helper/UpdateShipmentInfo
    CancelCvsOrder   /Express/CancelC2COrder       (7-ELEVEN C2C only)
    ReturnCvsOrder   per carrier                   (B2C returns)
"""

from datetime import date
from typing import Union

from shared.constants import (
    CVS_SUB_TYPES,
    Config,
    IsCollection,
    LogisticsSubType,
    LogisticsType,
    format_date,
    format_trade_date,
)

from .content import Content, RoutedContent, ShipmentFields


class CvsSubTypeShortcuts:
    """use_*() shortcuts for store pickup sub-types."""

    def use_unimart_c2c(self):
        return self.set_logistics_sub_type(LogisticsSubType.UNIMART_C2C)

    def use_fami_c2c(self):
        return self.set_logistics_sub_type(LogisticsSubType.FAMI_C2C)

    def use_hilife_c2c(self):
        return self.set_logistics_sub_type(LogisticsSubType.HILIFE_C2C)

    def use_okmart_c2c(self):
        return self.set_logistics_sub_type(LogisticsSubType.OKMART_C2C)

    def use_unimart_b2c(self):
        return self.set_logistics_sub_type(LogisticsSubType.UNIMART)

    def use_fami_b2c(self):
        return self.set_logistics_sub_type(LogisticsSubType.FAMI)

    def use_hilife_b2c(self):
        return self.set_logistics_sub_type(LogisticsSubType.HILIFE)


# =============================================================================
# Create
# =============================================================================

class CreateCvsOrder(CvsSubTypeShortcuts, ShipmentFields, Content):
    """
    Create a store pickup shipment.

    Defaults to 7-ELEVEN C2C without cash on delivery and a trade date
    of now. Sender and receiver names are limited to 10 characters.
    """

    REQUEST_PATH = "/Express/Create"
    ALLOWED_SUB_TYPES = CVS_SUB_TYPES
    REQUIRED_FIELDS = (
        "MerchantTradeNo",
        "MerchantTradeDate",
        "LogisticsSubType",
        "GoodsName",
        "SenderName",
        ("SenderPhone", "SenderCellPhone"),
        "ReceiverName",
        ("ReceiverPhone", "ReceiverCellPhone"),
        "ReceiverStoreID",
        "ServerReplyURL",
    )
    PERSON_NAME_MAX_LENGTH = Config.PERSON_NAME_MAX_LENGTH

    def _initialize(self):
        self._content["MerchantTradeDate"] = format_trade_date()
        self._content["LogisticsType"] = LogisticsType.CVS.value
        self.set_logistics_sub_type(LogisticsSubType.UNIMART_C2C)
        self._content["GoodsAmount"] = 0
        self._content["IsCollection"] = IsCollection.NO.value

    def set_return_store_id(self, store_id: str) -> "CreateCvsOrder":
        return self._set("ReturnStoreID", store_id)


# =============================================================================
# Update
# =============================================================================

class UpdateCvsOrder(ShipmentFields, Content):
    """Update shipment details (date, store, receiver) of an existing order."""

    REQUEST_PATH = "/Helper/UpdateShipmentInfo"
    ALLOWED_SUB_TYPES = CVS_SUB_TYPES
    REQUIRED_FIELDS = ("AllPayLogisticsID", "LogisticsSubType")

    def set_shipment_date(self, value: Union[date, str]) -> "UpdateCvsOrder":
        return self._set("ShipmentDate", format_date(value))

    def set_logistics_status(self, status: str) -> "UpdateCvsOrder":
        """B2C only."""
        return self._set("LogisticsStatus", status)

    def set_cvs_payment_no(self, payment_no: str) -> "UpdateCvsOrder":
        return self._set("CVSPaymentNo", payment_no)

    def set_cvs_validation_no(self, validation_no: str) -> "UpdateCvsOrder":
        return self._set("CVSValidationNo", validation_no)

    def set_store_id(self, store_id: str) -> "UpdateCvsOrder":
        return self._set("StoreID", store_id)


# =============================================================================
# Cancel
# =============================================================================

class CancelCvsOrder(Content):
    """
    Cancel a 7-ELEVEN C2C shipment.

    The provider only supports cancelling 7-ELEVEN C2C orders. The
    sub-type is checked on assignment but is not part of the request.
    """

    REQUEST_PATH = "/Express/CancelC2COrder"
    ALLOWED_SUB_TYPES = frozenset({LogisticsSubType.UNIMART_C2C})
    REQUIRED_FIELDS = ("AllPayLogisticsID", "CVSPaymentNo", "CVSValidationNo")
    EMIT_SUB_TYPE = False

    def _initialize(self):
        self.set_logistics_sub_type(LogisticsSubType.UNIMART_C2C)

    def set_all_pay_logistics_id(self, logistics_id: str) -> "CancelCvsOrder":
        return self._set("AllPayLogisticsID", logistics_id)

    def set_cvs_payment_no(self, payment_no: str) -> "CancelCvsOrder":
        return self._set("CVSPaymentNo", payment_no)

    def set_cvs_validation_no(self, validation_no: str) -> "CancelCvsOrder":
        return self._set("CVSValidationNo", validation_no)


# =============================================================================
# Return
# =============================================================================

class ReturnCvsOrder(ShipmentFields, RoutedContent):
    """
    Return a B2C store pickup shipment.

    Each carrier has its own return endpoint, so the request path is
    only known once the sub-type is assigned.
    """

    ROUTES = {
        LogisticsSubType.UNIMART: "/Express/ReturnUniMartCVS",
        LogisticsSubType.FAMI: "/Express/ReturnCVS",
        LogisticsSubType.HILIFE: "/Express/ReturnHiLifeCVS",
    }
    ALLOWED_SUB_TYPES = frozenset(ROUTES)
    REQUIRED_FIELDS = ("AllPayLogisticsID", "LogisticsSubType", "ServerReplyURL")

    def _initialize(self):
        self._content["GoodsAmount"] = 0

    def use_unimart_b2c(self) -> "ReturnCvsOrder":
        return self.set_logistics_sub_type(LogisticsSubType.UNIMART)

    def use_fami_b2c(self) -> "ReturnCvsOrder":
        return self.set_logistics_sub_type(LogisticsSubType.FAMI)

    def use_hilife_b2c(self) -> "ReturnCvsOrder":
        return self.set_logistics_sub_type(LogisticsSubType.HILIFE)
