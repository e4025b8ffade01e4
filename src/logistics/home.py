"""
Home delivery operations.

    CreateHomeOrder  /Express/Create       (T-CAT, Chunghwa Post)
    ReturnHomeOrder  /Express/ReturnHome   (T-CAT only)
"""

from datetime import date
from typing import Union

from shared.constants import (
    HOME_SUB_TYPES,
    Distance,
    IsCollection,
    LogisticsSubType,
    LogisticsType,
    ScheduledDeliveryTime,
    ScheduledPickupTime,
    Specification,
    Temperature,
    format_date,
    format_trade_date,
)

from .content import Content, ShipmentFields


_HOME_ADDRESS_FIELDS = (
    "SenderName",
    ("SenderPhone", "SenderCellPhone"),
    "SenderZipCode",
    "SenderAddress",
    "ReceiverName",
    ("ReceiverPhone", "ReceiverCellPhone"),
    "ReceiverZipCode",
    "ReceiverAddress",
    "ServerReplyURL",
)


class ParcelFields:
    """Temperature and pickup window setters shared by home operations."""

    def set_temperature(self, temperature: Union[Temperature, str]):
        return self._set("Temperature", Temperature(getattr(temperature, "value", temperature)))

    def set_scheduled_pickup_time(self, window: Union[ScheduledPickupTime, str]):
        return self._set("ScheduledPickupTime", ScheduledPickupTime(getattr(window, "value", window)))

    def room_temperature(self):
        return self.set_temperature(Temperature.ROOM)

    def refrigeration(self):
        return self.set_temperature(Temperature.REFRIGERATION)

    def freeze(self):
        return self.set_temperature(Temperature.FREEZE)


class CreateHomeOrder(ParcelFields, ShipmentFields, Content):
    """
    Create a home delivery shipment.

    Defaults: T-CAT, room temperature, same city, 60 cm parcel, no
    preferred pickup or delivery window, no cash on delivery.
    """

    REQUEST_PATH = "/Express/Create"
    ALLOWED_SUB_TYPES = HOME_SUB_TYPES
    REQUIRED_FIELDS = (
        "MerchantTradeNo",
        "MerchantTradeDate",
        "LogisticsSubType",
        "GoodsName",
    ) + _HOME_ADDRESS_FIELDS

    def _initialize(self):
        self._content["MerchantTradeDate"] = format_trade_date()
        self._content["LogisticsType"] = LogisticsType.HOME.value
        self.set_logistics_sub_type(LogisticsSubType.TCAT)
        self._content["GoodsAmount"] = 0
        self._content["IsCollection"] = IsCollection.NO.value
        self._content["Temperature"] = Temperature.ROOM.value
        self._content["Distance"] = Distance.SAME.value
        self._content["Specification"] = Specification.SIZE_60.value
        self._content["ScheduledPickupTime"] = ScheduledPickupTime.UNLIMITED.value
        self._content["ScheduledDeliveryTime"] = ScheduledDeliveryTime.UNLIMITED.value

    def set_distance(self, distance: Union[Distance, str]) -> "CreateHomeOrder":
        return self._set("Distance", Distance(getattr(distance, "value", distance)))

    def set_specification(self, specification: Union[Specification, str]) -> "CreateHomeOrder":
        return self._set("Specification", Specification(getattr(specification, "value", specification)))

    def set_scheduled_delivery_time(self, window: Union[ScheduledDeliveryTime, str]) -> "CreateHomeOrder":
        return self._set("ScheduledDeliveryTime", ScheduledDeliveryTime(getattr(window, "value", window)))

    def set_scheduled_delivery_date(self, value: Union[date, str]) -> "CreateHomeOrder":
        return self._set("ScheduledDeliveryDate", format_date(value))

    def set_package_count(self, count: int) -> "CreateHomeOrder":
        return self._set("PackageCount", int(count))

    def use_tcat(self) -> "CreateHomeOrder":
        return self.set_logistics_sub_type(LogisticsSubType.TCAT)

    def use_post(self) -> "CreateHomeOrder":
        return self.set_logistics_sub_type(LogisticsSubType.POST)

    def same_city(self) -> "CreateHomeOrder":
        return self.set_distance(Distance.SAME)

    def other_city(self) -> "CreateHomeOrder":
        return self.set_distance(Distance.OTHER)

    def island(self) -> "CreateHomeOrder":
        return self.set_distance(Distance.ISLAND)


class ReturnHomeOrder(ParcelFields, ShipmentFields, Content):
    """Return a T-CAT home delivery shipment to the merchant."""

    REQUEST_PATH = "/Express/ReturnHome"
    ALLOWED_SUB_TYPES = frozenset({LogisticsSubType.TCAT})
    REQUIRED_FIELDS = ("AllPayLogisticsID", "LogisticsSubType") + _HOME_ADDRESS_FIELDS

    def _initialize(self):
        self.set_logistics_sub_type(LogisticsSubType.TCAT)
        self._content["GoodsAmount"] = 0
        self._content["Temperature"] = Temperature.ROOM.value
        self._content["ScheduledPickupTime"] = ScheduledPickupTime.UNLIMITED.value
