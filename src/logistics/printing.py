"""
Shipping label printing.

The provider answers these requests with an HTML page meant to be shown
in a browser, so callers usually post them through to_form().

- PrintTradeDocument: B2C store pickup and home delivery labels
- PrintCvsDocument: C2C labels, one endpoint per carrier
"""

from typing import Iterable, List

from shared.constants import B2C_SUB_TYPES, C2C_SUB_TYPES, HOME_SUB_TYPES, LogisticsSubType

from .content import Content, RoutedContent


class PrintTradeDocument(Content):
    """Print B2C or home delivery labels for one or more shipments."""

    REQUEST_PATH = "/helper/printTradeDocument"
    ALLOWED_SUB_TYPES = B2C_SUB_TYPES | HOME_SUB_TYPES
    REQUIRED_FIELDS = ("AllPayLogisticsID",)

    def _initialize(self):
        self._logistics_ids: List[str] = []

    def set_all_pay_logistics_id(self, logistics_id: str) -> "PrintTradeDocument":
        return self.set_all_pay_logistics_ids([logistics_id])

    def set_all_pay_logistics_ids(self, logistics_ids: Iterable[str]) -> "PrintTradeDocument":
        self._check_mutable()
        self._logistics_ids = [str(i) for i in logistics_ids]
        return self._set_joined("AllPayLogisticsID", self._logistics_ids)

    def add_logistics_id(self, logistics_id: str) -> "PrintTradeDocument":
        self._check_mutable()
        self._logistics_ids.append(str(logistics_id))
        return self._set_joined("AllPayLogisticsID", self._logistics_ids)

    def use_unimart_b2c(self) -> "PrintTradeDocument":
        return self.set_logistics_sub_type(LogisticsSubType.UNIMART)

    def use_fami_b2c(self) -> "PrintTradeDocument":
        return self.set_logistics_sub_type(LogisticsSubType.FAMI)

    def use_hilife_b2c(self) -> "PrintTradeDocument":
        return self.set_logistics_sub_type(LogisticsSubType.HILIFE)

    def use_tcat(self) -> "PrintTradeDocument":
        return self.set_logistics_sub_type(LogisticsSubType.TCAT)

    def use_post(self) -> "PrintTradeDocument":
        return self.set_logistics_sub_type(LogisticsSubType.POST)


class PrintCvsDocument(RoutedContent):
    """
    Print C2C store pickup labels.

    7-ELEVEN identifies shipments by CVSPaymentNo + CVSValidationNo;
    the other carriers use AllPayLogisticsID.
    """

    ROUTES = {
        LogisticsSubType.UNIMART_C2C: "/Express/PrintUniMartC2COrderInfo",
        LogisticsSubType.FAMI_C2C: "/Express/PrintFAMIC2COrderInfo",
        LogisticsSubType.HILIFE_C2C: "/Express/PrintHILIFEC2COrderInfo",
        LogisticsSubType.OKMART_C2C: "/Express/PrintOKMARTC2COrderInfo",
    }
    ALLOWED_SUB_TYPES = C2C_SUB_TYPES
    REQUIRED_FIELDS = ("LogisticsSubType",)

    def _violations(self):
        yield from super()._violations()
        if self._sub_type is LogisticsSubType.UNIMART_C2C:
            yield from self._missing_all("CVSPaymentNo", "CVSValidationNo")
        else:
            yield from self._missing_all("AllPayLogisticsID")

    def set_all_pay_logistics_id(self, logistics_id: str) -> "PrintCvsDocument":
        return self._set("AllPayLogisticsID", logistics_id)

    def set_all_pay_logistics_ids(self, logistics_ids: Iterable[str]) -> "PrintCvsDocument":
        return self._set_joined("AllPayLogisticsID", logistics_ids)

    def set_cvs_payment_no(self, payment_no: str) -> "PrintCvsDocument":
        return self._set("CVSPaymentNo", payment_no)

    def set_cvs_payment_nos(self, payment_nos: Iterable[str]) -> "PrintCvsDocument":
        return self._set_joined("CVSPaymentNo", payment_nos)

    def set_cvs_validation_no(self, validation_no: str) -> "PrintCvsDocument":
        return self._set("CVSValidationNo", validation_no)

    def set_cvs_validation_nos(self, validation_nos: Iterable[str]) -> "PrintCvsDocument":
        return self._set_joined("CVSValidationNo", validation_nos)

    def use_unimart_c2c(self) -> "PrintCvsDocument":
        return self.set_logistics_sub_type(LogisticsSubType.UNIMART_C2C)

    def use_fami_c2c(self) -> "PrintCvsDocument":
        return self.set_logistics_sub_type(LogisticsSubType.FAMI_C2C)

    def use_hilife_c2c(self) -> "PrintCvsDocument":
        return self.set_logistics_sub_type(LogisticsSubType.HILIFE_C2C)

    def use_okmart_c2c(self) -> "PrintCvsDocument":
        return self.set_logistics_sub_type(LogisticsSubType.OKMART_C2C)

    def for_unimart(self, payment_no: str, validation_no: str) -> "PrintCvsDocument":
        """7-ELEVEN C2C label in one call."""
        return (
            self.use_unimart_c2c()
            .set_cvs_payment_no(payment_no)
            .set_cvs_validation_no(validation_no)
        )
