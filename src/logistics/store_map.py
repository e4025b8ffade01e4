"""
Store map.

OpenStoreMap is not sent by the backend: the signed fields are posted
from the shopper's browser (see Content.to_form), the provider shows its
store picker and posts the chosen store back to ServerReplyURL.
"""

from typing import Union

from shared.constants import CVS_SUB_TYPES, Device, IsCollection, LogisticsSubType, LogisticsType

from .content import Content
from .cvs import CvsSubTypeShortcuts


class OpenStoreMap(CvsSubTypeShortcuts, Content):
    """Open the provider's store picker for a store pickup sub-type."""

    REQUEST_PATH = "/Express/map"
    ALLOWED_SUB_TYPES = CVS_SUB_TYPES
    REQUIRED_FIELDS = (
        "MerchantTradeNo",
        "LogisticsType",
        "LogisticsSubType",
        "IsCollection",
        "ServerReplyURL",
    )

    def _initialize(self):
        self._content["LogisticsType"] = LogisticsType.CVS.value
        self.set_logistics_sub_type(LogisticsSubType.UNIMART_C2C)
        self._content["IsCollection"] = IsCollection.NO.value
        self._content["Device"] = Device.PC.value

    def set_logistics_type(self, logistics_type: Union[LogisticsType, str]) -> "OpenStoreMap":
        return self._set("LogisticsType", LogisticsType(getattr(logistics_type, "value", logistics_type)))

    def set_is_collection(self, value: Union[IsCollection, str]) -> "OpenStoreMap":
        return self._set("IsCollection", IsCollection(getattr(value, "value", value)))

    def set_extra_data(self, extra_data: str) -> "OpenStoreMap":
        """Opaque value echoed back with the chosen store."""
        return self._set("ExtraData", extra_data)

    def set_device(self, device: Union[Device, int]) -> "OpenStoreMap":
        return self._set("Device", Device(int(getattr(device, "value", device))))

    def with_collection(self) -> "OpenStoreMap":
        return self.set_is_collection(IsCollection.YES)

    def without_collection(self) -> "OpenStoreMap":
        return self.set_is_collection(IsCollection.NO)

    def use_mobile_device(self) -> "OpenStoreMap":
        return self.set_device(Device.MOBILE)

    def use_pc_device(self) -> "OpenStoreMap":
        return self.set_device(Device.PC)
