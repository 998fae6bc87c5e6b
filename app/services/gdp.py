from __future__ import annotations

import random
from decimal import Decimal

MULTIPLIER_MIN = 1000
MULTIPLIER_MAX = 2000


def estimate_gdp(population: int, exchange_rate: Decimal | None, rng: random.Random) -> Decimal | None:
    """Estimate GDP as ``population * randint(1000, 2000) / exchange_rate``.

    ``None`` when the rate is unknown; zero for an empty population. The
    multiplier is drawn from ``rng`` so results differ between refreshes unless
    the generator is seeded.
    """
    if exchange_rate is None:
        return None
    if population == 0:
        return Decimal(0)
    multiplier = rng.randint(MULTIPLIER_MIN, MULTIPLIER_MAX)
    return Decimal(population) * multiplier / exchange_rate
