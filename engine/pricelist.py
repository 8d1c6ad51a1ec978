"""
Pricelist Resolver: the single source of truth for tenure rates.

Unknown pricelist names degrade to the default pricelist ("standard") so the
catalog never hard-fails on a bad plan name. The degrade is explicit: the
returned RateDescriptor has ``is_fallback=True`` and a warning is logged.
Unknown tenures are always an error.
"""

from dataclasses import replace

from config.config import PricingConfig, load_pricing_config
from models.enums import DiscountType, RateKind, Tenure
from models.pricing import DiscountRule, Pricelist, RateDescriptor
from utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_PRICELIST_NAME = "standard"

STANDARD = Pricelist(
    name="standard",
    rates={Tenure.HOUR: 0.01, Tenure.DAY: 0.06, Tenure.WEEK: 0.28, Tenure.MONTH: 0.9},
)
STUDENT = Pricelist(
    name="student",
    rates={Tenure.HOUR: 0.008, Tenure.DAY: 0.05, Tenure.WEEK: 0.25, Tenure.MONTH: 0.8},
    discounts=(DiscountRule(type=DiscountType.PERCENT, value=10, code="STUDENT10"),),
)
CORPORATE = Pricelist(
    name="corporate",
    rates={Tenure.HOUR: 0.009, Tenure.DAY: 0.055, Tenure.WEEK: 0.26, Tenure.MONTH: 0.85},
    discounts=(DiscountRule(type=DiscountType.FIXED, value=500, code="CORP500"),),
)

BUILTIN_PRICELISTS: tuple[Pricelist, ...] = (STANDARD, STUDENT, CORPORATE)


class PricelistResolver:
    """
    Registry of named pricelists with an explicit default.
    """

    def __init__(
        self,
        pricelists: list[Pricelist] | tuple[Pricelist, ...] | None = None,
        default_name: str = DEFAULT_PRICELIST_NAME,
    ):
        self._pricelists: dict[str, Pricelist] = {}
        for pricelist in BUILTIN_PRICELISTS if pricelists is None else pricelists:
            self.register(pricelist)
        if default_name.lower() not in self._pricelists:
            raise ValueError(f"Default pricelist {default_name!r} is not registered")
        self.default_name = default_name.lower()

    def register(self, pricelist: Pricelist) -> None:
        """Add or replace a pricelist (names are case-insensitive)."""
        self._pricelists[pricelist.name.lower()] = pricelist

    def names(self) -> list[str]:
        return sorted(self._pricelists)

    def get(self, name: str | None) -> tuple[Pricelist, bool]:
        """Return (pricelist, is_fallback) for a name, degrading to the default."""
        key = (name or "").strip().lower()
        if key in self._pricelists:
            return self._pricelists[key], False
        logger.warning(
            f"Unknown pricelist {name!r}; falling back to default {self.default_name!r}"
        )
        return self._pricelists[self.default_name], True

    def resolve_rate(self, pricelist_name: str | None, tenure: Tenure | str) -> RateDescriptor:
        tenure = Tenure.parse(tenure)
        pricelist, is_fallback = self.get(pricelist_name)
        return RateDescriptor(
            pricelist=pricelist.name,
            requested=pricelist_name,
            tenure=tenure,
            kind=pricelist.rate_kind,
            value=pricelist.rate_for(tenure),
            discounts=pricelist.discounts,
            deposit_fraction=pricelist.deposit_fraction,
            min_deposit=pricelist.min_deposit,
            is_fallback=is_fallback,
        )


def build_resolver(config: PricingConfig | None = None) -> PricelistResolver:
    """
    Resolver over the built-in pricelists with the deposit settings and
    default pricelist taken from `config` (default: loaded from the environment).
    """
    config = config or load_pricing_config()
    pricelists = [
        replace(
            pricelist,
            deposit_fraction=config.deposit_fraction,
            min_deposit=config.min_deposit,
        )
        for pricelist in BUILTIN_PRICELISTS
    ]
    return PricelistResolver(pricelists, default_name=config.default_pricelist)


_default_resolver: PricelistResolver | None = None


def get_default_resolver() -> PricelistResolver:
    global _default_resolver
    if _default_resolver is None:
        _default_resolver = build_resolver()
    return _default_resolver


def resolve_rate(
    pricelist_name: str | None,
    tenure: Tenure | str,
    resolver: PricelistResolver | None = None,
) -> RateDescriptor:
    """Resolve the rate for a tenure under a named pricelist (default: "standard")."""
    return (resolver or get_default_resolver()).resolve_rate(pricelist_name, tenure)


def absolute_pricelist(
    name: str,
    hourly: float,
    daily: float,
    weekly: float,
    monthly: float,
    discounts: tuple[DiscountRule, ...] = (),
    deposit_fraction: float = 0.10,
    min_deposit: float = 0.0,
) -> Pricelist:
    """Build a pricelist of flat per-unit rates, as set on the admin pricing screen."""
    return Pricelist(
        name=name,
        rates={
            Tenure.HOUR: hourly,
            Tenure.DAY: daily,
            Tenure.WEEK: weekly,
            Tenure.MONTH: monthly,
        },
        rate_kind=RateKind.ABSOLUTE,
        discounts=discounts,
        deposit_fraction=deposit_fraction,
        min_deposit=min_deposit,
    )


def recommend_rate_card(daily_rate: float) -> dict[str, float]:
    """
    Suggested absolute rates derived from a daily rate: a week costs six days,
    a month costs twenty-five, and the deposit is ten days' worth.
    """
    if daily_rate < 0:
        raise ValueError("daily_rate must be non-negative")
    return {
        "daily": daily_rate,
        "weekly": round(daily_rate * 6),
        "monthly": round(daily_rate * 25),
        "deposit": round(daily_rate * 10),
    }
