from __future__ import annotations

from dataclasses import dataclass


# Windows icon sizes, in directory order.
ICO_SIZES: tuple[int, ...] = (16, 24, 32, 48, 64, 128, 256)


@dataclass(frozen=True)
class IcnsType:
    ostype: str
    size: int
    retina: bool = False

    def __post_init__(self) -> None:
        if len(self.ostype) != 4 or not self.ostype.isascii():
            raise ValueError(f"OSType must be 4 ASCII characters: {self.ostype!r}")
        if self.size <= 0:
            raise ValueError(f"Icon size must be positive: {self.size}")


ICNS_TYPES: tuple[IcnsType, ...] = (
    IcnsType("icp4", 16),
    IcnsType("icp5", 32),
    IcnsType("icp6", 64),
    IcnsType("ic07", 128),
    IcnsType("ic08", 256),
    IcnsType("ic09", 512),
    IcnsType("ic10", 1024),
    # @2x variants: 16, 32, 128 and 256 points
    IcnsType("ic11", 32, retina=True),
    IcnsType("ic12", 64, retina=True),
    IcnsType("ic13", 256, retina=True),
    IcnsType("ic14", 512, retina=True),
)
