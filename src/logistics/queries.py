"""
Read-only queries: order status and store directory.
"""

import time
from typing import Union

from shared.constants import CVS_SUB_TYPES, LogisticsSubType, StoreType

from .content import Content


class QueryLogisticsOrder(Content):
    """Look up the current status of a shipment."""

    REQUEST_PATH = "/Helper/QueryLogisticsTradeInfo/V4"
    REQUIRED_FIELDS = ("AllPayLogisticsID", "TimeStamp")

    def _initialize(self):
        self._content["TimeStamp"] = int(time.time())

    def set_all_pay_logistics_id(self, logistics_id: str) -> "QueryLogisticsOrder":
        return self._set("AllPayLogisticsID", logistics_id)

    def set_time_stamp(self, timestamp: int) -> "QueryLogisticsOrder":
        """Unix time; the provider rejects stamps older than a few minutes."""
        return self._set("TimeStamp", int(timestamp))


class GetStoreList(Content):
    """
    Search a carrier's stores.

    At least one of Keyword, ZipCode or City narrows the search; the
    provider refuses to return the full directory.
    """

    REQUEST_PATH = "/Express/GetStoreList"
    ALLOWED_SUB_TYPES = CVS_SUB_TYPES
    REQUIRED_FIELDS = ("LogisticsSubType", ("Keyword", "ZipCode", "City"))

    def _initialize(self):
        self._content["StoreType"] = StoreType.PICKUP_ONLY.value

    def set_store_type(self, store_type: Union[StoreType, str]) -> "GetStoreList":
        return self._set("StoreType", StoreType(getattr(store_type, "value", store_type)))

    def set_keyword(self, keyword: str) -> "GetStoreList":
        return self._set("Keyword", keyword)

    def set_zip_code(self, zip_code: str) -> "GetStoreList":
        return self._set("ZipCode", zip_code)

    def set_city(self, city: str) -> "GetStoreList":
        return self._set("City", city)

    def search_unimart(self, c2c: bool = True) -> "GetStoreList":
        return self.set_logistics_sub_type(
            LogisticsSubType.UNIMART_C2C if c2c else LogisticsSubType.UNIMART
        )

    def search_fami(self, c2c: bool = True) -> "GetStoreList":
        return self.set_logistics_sub_type(
            LogisticsSubType.FAMI_C2C if c2c else LogisticsSubType.FAMI
        )

    def search_hilife(self, c2c: bool = True) -> "GetStoreList":
        return self.set_logistics_sub_type(
            LogisticsSubType.HILIFE_C2C if c2c else LogisticsSubType.HILIFE
        )

    def search_okmart(self) -> "GetStoreList":
        return self.set_logistics_sub_type(LogisticsSubType.OKMART_C2C)

    def pickup_only(self) -> "GetStoreList":
        return self.set_store_type(StoreType.PICKUP_ONLY)

    def pickup_and_return(self) -> "GetStoreList":
        return self.set_store_type(StoreType.PICKUP_AND_RETURN)

    def return_only(self) -> "GetStoreList":
        return self.set_store_type(StoreType.RETURN_ONLY)

    by_keyword = set_keyword
    by_zip_code = set_zip_code
    by_city = set_city
