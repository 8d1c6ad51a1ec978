"""
Configuration classes for the RentKaro pricing engine.
Defines pricing and reservation lifecycle settings in a type-safe, extensible way.
"""

from dataclasses import dataclass

from utils.env import env_float, env_int, env_str, load_project_dotenv


@dataclass
class PricingConfig:
    default_pricelist: str = "standard"
    tax_rate: float = 0.18  # GST
    deposit_fraction: float = 0.10  # Of the product's base price
    min_deposit: float = 0.0
    currency_symbol: str = "₹"

    def __post_init__(self):
        if self.tax_rate < 0:
            raise ValueError("tax_rate must be non-negative")
        if self.deposit_fraction < 0 or self.min_deposit < 0:
            raise ValueError("deposit settings must be non-negative")


@dataclass
class LifecycleConfig:
    late_grace_days: int = 1
    late_fee_per_day: float = 100.0

    def __post_init__(self):
        if self.late_grace_days < 0 or self.late_fee_per_day < 0:
            raise ValueError("late return settings must be non-negative")


def load_pricing_config() -> PricingConfig:
    """Build a PricingConfig from RENTKARO_* environment variables (and .env)."""
    load_project_dotenv()
    defaults = PricingConfig()
    return PricingConfig(
        default_pricelist=env_str("RENTKARO_DEFAULT_PRICELIST", defaults.default_pricelist),
        tax_rate=env_float("RENTKARO_TAX_RATE", defaults.tax_rate),
        deposit_fraction=env_float("RENTKARO_DEPOSIT_FRACTION", defaults.deposit_fraction),
        min_deposit=env_float("RENTKARO_MIN_DEPOSIT", defaults.min_deposit),
        currency_symbol=env_str("RENTKARO_CURRENCY", defaults.currency_symbol),
    )


def load_lifecycle_config() -> LifecycleConfig:
    load_project_dotenv()
    defaults = LifecycleConfig()
    return LifecycleConfig(
        late_grace_days=env_int("RENTKARO_LATE_GRACE_DAYS", defaults.late_grace_days),
        late_fee_per_day=env_float("RENTKARO_LATE_FEE_PER_DAY", defaults.late_fee_per_day),
    )


# Example usage:
# pricing = load_pricing_config()
# totals = compute_totals(items, tax_rate=pricing.tax_rate)
