"""Chain registry asset descriptions."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

DENOM_BZE = "bze"
DENOM_UBZE = "ubze"


@dataclass
class AssetDenom:
    """One denomination unit of an asset."""

    denom: str = ""
    exponent: int = 0
    aliases: list[str] = field(default_factory=list)

    def is_bze(self) -> bool:
        return self.denom in (DENOM_BZE, DENOM_UBZE)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AssetDenom:
        return cls(
            denom=data.get("denom", ""),
            exponent=int(data.get("exponent", 0)),
            aliases=list(data.get("aliases") or []),
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"denom": self.denom, "exponent": self.exponent}
        if self.aliases:
            result["aliases"] = list(self.aliases)
        return result


@dataclass
class Asset:
    """An asset as listed in the chain registry."""

    denom_units: list[AssetDenom] = field(default_factory=list)
    base: str = ""
    name: str = ""
    display: str = ""
    symbol: str = ""

    def display_denom_unit(self) -> AssetDenom | None:
        """Return the denomination unit used for display, if any."""
        return next((d for d in self.denom_units if d.denom == self.display), None)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Asset:
        return cls(
            denom_units=[AssetDenom.from_dict(d) for d in data.get("denom_units") or []],
            base=data.get("base", ""),
            name=data.get("name", ""),
            display=data.get("display", ""),
            symbol=data.get("symbol", ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "denom_units": [d.to_dict() for d in self.denom_units],
            "base": self.base,
            "name": self.name,
            "display": self.display,
            "symbol": self.symbol,
        }


@dataclass
class AssetList:
    """The full asset list of a chain."""

    chain_name: str = ""
    assets: list[Asset] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AssetList:
        return cls(
            chain_name=data.get("chain_name", ""),
            assets=[Asset.from_dict(a) for a in data.get("assets") or []],
        )