"""
CCU Rounder: Data Dictionary
============================
Form records (what the clinician types), derived results (what the engines
return) and the numeric parsing contract that sits between them.

NO FORMULAS live here. Every numeric field is Optional: None means "absent",
and absence is the only error signal the calculation layer knows.
"""

import math
from dataclasses import dataclass, fields, asdict
from typing import Any, Mapping, Optional

from constants import Sex

class UnknownFormError(KeyError):
    """Raised when a persisted form slot is requested by an unknown tool name."""
    pass

# --- 1. PARSING CONTRACT (Text field -> Number) ---

def parse_number(raw: Any) -> Optional[float]:
    """
    Converts a raw form value to a finite float.
    Blank/garbage text, booleans, NaN and +/-inf all become None (never 0).
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, str):
        raw = raw.strip()
        if not raw:
            return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    return value if math.isfinite(value) else None

def parse_sex(raw: Any) -> Sex:
    if isinstance(raw, Sex):
        return raw
    try:
        return Sex(str(raw).strip().upper()) if raw is not None else Sex.UNSPECIFIED
    except ValueError:
        return Sex.UNSPECIFIED

def _numeric_fields(cls) -> list:
    return [f.name for f in fields(cls) if f.name != "sex"]

# --- 2. INPUT LAYER (What the Clinician Enters) ---

@dataclass(frozen=True)
class HemoInputs:
    """
    Bedside snapshot for the Fick-estimate hemodynamic profile.
    Enter what you have; missing values are okay.
    """
    sex: Sex = Sex.UNSPECIFIED         # Recorded only, no formula uses it

    # Patient
    height_cm: Optional[float] = None
    weight_kg: Optional[float] = None
    hemoglobin_g_dl: Optional[float] = None
    heart_rate: Optional[float] = None  # bpm

    # Pressures (mmHg)
    systolic_bp: Optional[float] = None
    diastolic_bp: Optional[float] = None
    cvp_mmhg: Optional[float] = None
    pa_systolic_mmhg: Optional[float] = None
    pa_diastolic_mmhg: Optional[float] = None
    pcwp_mmhg: Optional[float] = None

    # Oxygenation (%)
    sa_o2_percent: Optional[float] = None  # arterial
    sv_o2_percent: Optional[float] = None  # mixed venous

    # EXTENSION POINT: replaces the 125 x BSA estimate when supplied
    measured_vo2_ml_min: Optional[float] = None

    @classmethod
    def from_form(cls, data: Optional[Mapping[str, Any]]) -> "HemoInputs":
        """Builds a record from raw form values. Unknown keys are ignored."""
        data = data or {}
        values = {name: parse_number(data.get(name)) for name in _numeric_fields(cls)}
        return cls(sex=parse_sex(data.get("sex")), **values)

    def to_dict(self) -> dict:
        out = asdict(self)
        out["sex"] = self.sex.value
        return out

@dataclass(frozen=True)
class DripInputs:
    """Bag / patient / pump settings for the vasopressor-inotrope drip calculator."""
    weight_kg: Optional[float] = None
    drug_mg: Optional[float] = None                 # Drug in bag
    volume_ml: Optional[float] = None               # Diluent volume
    rate_ml_hr: Optional[float] = None              # From rate -> dose
    target_dose_mcg_kg_min: Optional[float] = None  # From target dose -> rate

    @classmethod
    def from_form(cls, data: Optional[Mapping[str, Any]]) -> "DripInputs":
        data = data or {}
        return cls(**{f.name: parse_number(data.get(f.name)) for f in fields(cls)})

    def to_dict(self) -> dict:
        return asdict(self)

# --- 3. OUTPUT LAYER (Derived Values) ---

@dataclass(frozen=True)
class HemoResults:
    """
    Every field is independently optional: present only when all of its
    upstream inputs are present and its validity guard passed.
    """
    bsa_m2: Optional[float] = None
    map_mmhg: Optional[float] = None
    mpap_mmhg: Optional[float] = None
    ca_o2_ml_dl: Optional[float] = None
    cv_o2_ml_dl: Optional[float] = None
    vo2_ml_min: Optional[float] = None
    cardiac_output_l_min: Optional[float] = None
    cardiac_index_l_min_m2: Optional[float] = None
    stroke_volume_ml: Optional[float] = None
    svr_dyn: Optional[float] = None
    pvr_dyn: Optional[float] = None       # dyn·s·cm⁻⁵
    pvr_wood_units: Optional[float] = None

    # True when VO2 came from measured_vo2_ml_min instead of the estimate
    vo2_measured: bool = False

    def to_dict(self) -> dict:
        return asdict(self)

@dataclass(frozen=True)
class DripResults:
    concentration_mg_ml: Optional[float] = None
    dose_mcg_kg_min: Optional[float] = None  # from rate_ml_hr
    rate_ml_hr: Optional[float] = None       # from target_dose_mcg_kg_min

    def to_dict(self) -> dict:
        return asdict(self)
