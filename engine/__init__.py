from .availability import get_availability, ranges_overlap  # noqa: F401
from .pricelist import PricelistResolver, resolve_rate  # noqa: F401
from .rental_price import calculate_rental_price  # noqa: F401
from .totals import compute_totals  # noqa: F401
