# formatting.py
import math
from typing import Optional

from models import HemoResults, DripResults
from constants import DISPLAY_PRECISION

def to_fixed_or_dash(value: Optional[float], digits: int = 2) -> str:
    """Fixed decimals for a finite number, the placeholder dash otherwise."""
    if value is None or isinstance(value, bool) or not math.isfinite(value):
        return DISPLAY_PRECISION.PLACEHOLDER
    return f"{value:.{digits}f}"

def _format(values: dict, precision: dict) -> dict:
    return {key: to_fixed_or_dash(values.get(key), digits) for key, digits in precision.items()}

def format_hemo_results(results: HemoResults) -> dict:
    return _format(results.to_dict(), DISPLAY_PRECISION.HEMO)

def format_drip_results(results: DripResults) -> dict:
    return _format(results.to_dict(), DISPLAY_PRECISION.DRIP)
