"""Conversion assumptions: coverage ratio and win rates per (region, sql_type),
average contract values per region.

Lookups return ``None`` when no row is configured; callers decide whether
to skip or zero the combination.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, Iterable, Optional, Tuple

from app.modeling.errors import ForecastInputError
from app.modeling.money import scale_bp


@dataclass(frozen=True)
class ConversionRate:
    region: str
    sql_type: str
    opp_coverage_ratio: int
    win_rate_new: int
    win_rate_upsell: int


@dataclass(frozen=True)
class DealEconomics:
    region: str
    acv_new: int
    acv_upsell: int


class ConversionModel:
    def __init__(
        self,
        rates: Iterable[ConversionRate] = (),
        economics: Iterable[DealEconomics] = (),
    ) -> None:
        self._rates: Dict[Tuple[str, str], ConversionRate] = {
            (r.region, r.sql_type): r for r in rates
        }
        self._economics: Dict[str, DealEconomics] = {e.region: e for e in economics}

    def rate_for(self, region: str, sql_type: str) -> Optional[ConversionRate]:
        return self._rates.get((region, sql_type))

    def economics_for(self, region: str) -> Optional[DealEconomics]:
        return self._economics.get(region)

    @property
    def rates(self) -> Tuple[ConversionRate, ...]:
        return tuple(self._rates[k] for k in sorted(self._rates))

    @property
    def economics(self) -> Tuple[DealEconomics, ...]:
        return tuple(self._economics[k] for k in sorted(self._economics))

    def adjusted(
        self,
        coverage_multiplier: float = 1.0,
        acv_new_delta: int = 0,
        acv_upsell_delta: int = 0,
    ) -> "ConversionModel":
        """Return a new model with What-If overrides applied.

        The coverage ratio is scaled; win rates are left alone. ACV deltas
        are additive cents.
        """
        rates = [
            replace(r, opp_coverage_ratio=scale_bp(r.opp_coverage_ratio, coverage_multiplier))
            for r in self.rates
        ]
        economics = [
            replace(
                e,
                acv_new=e.acv_new + acv_new_delta,
                acv_upsell=e.acv_upsell + acv_upsell_delta,
            )
            for e in self.economics
        ]
        for e in economics:
            if e.acv_new < 0 or e.acv_upsell < 0:
                raise ForecastInputError(
                    f"ACV adjustment makes {e.region} ACV negative "
                    f"(new={e.acv_new}, upsell={e.acv_upsell} cents)"
                )
        return ConversionModel(rates, economics)
