"""UTC datetime utilities."""

import math
from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def seconds_until(moment: datetime) -> int:
    """Whole seconds from now until `moment`, rounded down; negative once passed."""
    return math.floor((moment - utc_now()).total_seconds())
