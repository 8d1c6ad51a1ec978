"""
Sustainability impact of renting instead of buying.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

DEFAULT_CO2_NEW = 120.0  # kg CO2 to make the product new
DEFAULT_CO2_REUSE = 20.0  # kg CO2 attributable to a rental
DEFAULT_WEIGHT_KG = 10.0
DEFAULT_WASTE_FACTOR = 0.6
DAILY_RENTAL_SHARE = 0.06  # Rental cost per day as a share of retail price
DEFAULT_RENTAL_DAYS = 7


@dataclass(frozen=True)
class Impact:
    co2_saved: float
    money_saved: float
    waste_avoided: float


def calculate_impact(
    profile: Mapping[str, Any], quantity: int, rental_days: int
) -> Impact:
    """
    CO2 saved   = (co2_new - co2_reuse) x units
    Money saved = (retail - retail x 0.06 x days) x units
    Waste       = weight x waste_factor x units
    """
    co2_new = profile.get("co2_new") or DEFAULT_CO2_NEW
    co2_reuse = profile.get("co2_reuse") or DEFAULT_CO2_REUSE
    weight = profile.get("weight_kg") or DEFAULT_WEIGHT_KG
    waste_factor = profile.get("waste_factor") or DEFAULT_WASTE_FACTOR
    retail = profile.get("retail_cost") or 0.0

    return Impact(
        co2_saved=round((co2_new - co2_reuse) * quantity, 2),
        money_saved=round((retail - retail * DAILY_RENTAL_SHARE * rental_days) * quantity),
        waste_avoided=round(weight * waste_factor * quantity, 2),
    )


def aggregate_impact(entries: Iterable[Mapping[str, Any]]) -> Impact:
    """Sum impact over entries shaped like {"profile", "quantity", "rental_days"}."""
    co2 = money = waste = 0.0
    for entry in entries:
        impact = calculate_impact(
            entry.get("profile", {}),
            entry.get("quantity", 1),
            entry.get("rental_days") or DEFAULT_RENTAL_DAYS,
        )
        co2 += impact.co2_saved
        money += impact.money_saved
        waste += impact.waste_avoided
    return Impact(co2_saved=round(co2, 2), money_saved=money, waste_avoided=round(waste, 2))
