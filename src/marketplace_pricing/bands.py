# This module models threshold ladders as ordered tuples of bands.
# It exists so every stepwise pricing rule reads the same way and can be tuned from policy YAML.
# A ladder is evaluated first-match, so ordering inside the tuple is part of the rule.
# Bands carry a label alongside their value so callers can explain which step fired.

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Band:
    value: float
    label: str = ""
    above: float | None = None
    below: float | None = None
    inclusive: bool = False

    def matches(self, metric: float) -> bool:
        if self.above is not None:
            if self.inclusive and metric < self.above:
                return False
            if not self.inclusive and metric <= self.above:
                return False
        if self.below is not None:
            if self.inclusive and metric > self.below:
                return False
            if not self.inclusive and metric >= self.below:
                return False
        return True


def select_band(metric: float, bands: Sequence[Band]) -> Band | None:
    for band in bands:
        if band.matches(metric):
            return band
    return None


def band_value(metric: float, bands: Sequence[Band], *, default: float) -> float:
    band = select_band(metric, bands)
    if band is None:
        return default
    return band.value


def band_label(metric: float, bands: Sequence[Band], *, default: str) -> str:
    band = select_band(metric, bands)
    if band is None:
        return default
    return band.label or default


def parse_bands(raw: Iterable[dict[str, Any]], field_name: str) -> tuple[Band, ...]:
    bands: list[Band] = []
    for item in raw:
        if not isinstance(item, dict):
            raise ValueError(f"{field_name} entries must be mappings, got: {type(item).__name__}")
        if "value" not in item:
            raise ValueError(f"{field_name} entries require a 'value' key")
        above = item.get("above")
        below = item.get("below")
        if above is None and below is None:
            raise ValueError(f"{field_name} entries require 'above' or 'below'")
        bands.append(
            Band(
                value=float(item["value"]),
                label=str(item.get("label", "")),
                above=float(above) if above is not None else None,
                below=float(below) if below is not None else None,
                inclusive=bool(item.get("inclusive", False)),
            )
        )
    return tuple(bands)


def bands_to_dicts(bands: Sequence[Band]) -> list[dict[str, Any]]:
    return [
        {
            "value": band.value,
            "label": band.label,
            "above": band.above,
            "below": band.below,
            "inclusive": band.inclusive,
        }
        for band in bands
    ]
