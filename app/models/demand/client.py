"""Upstream client names."""

from enum import Enum


class ClientName(str, Enum):
    """Fixed set of clients that publish demand sheets."""

    ZEPTO = "Zepto"
    BLINKIT = "Blinkit"
    SWIGGY_FOOD = "SwiggyFood"
    SWIGGY_IM = "SwiggyIM"

    def __str__(self) -> str:
        return self.value


ALL_CLIENTS = list(ClientName)
