# drip.py
import math
from typing import Optional

from models import DripInputs, DripResults
from constants import DRIP_CONSTANTS

def _finite_ratio(numerator: float, denominator: float) -> Optional[float]:
    """numerator / denominator, or None if either side or the result overflowed."""
    if not (math.isfinite(numerator) and math.isfinite(denominator)):
        return None
    value = numerator / denominator
    return value if math.isfinite(value) else None

def concentration_mg_ml(drug_mg: Optional[float], volume_ml: Optional[float]) -> Optional[float]:
    """Bag concentration (mg/mL). None unless volume > 0 and the result is > 0."""
    if drug_mg is None or volume_ml is None or volume_ml <= 0:
        return None
    conc = drug_mg / volume_ml
    return conc if math.isfinite(conc) and conc > 0 else None

def _guards_pass(value: Optional[float], concentration: Optional[float], weight_kg: Optional[float]) -> bool:
    if value is None or concentration is None or weight_kg is None:
        return False
    return value >= 0 and concentration > 0 and weight_kg > 0

def dose_from_rate(rate_ml_hr: Optional[float], concentration: Optional[float],
                   weight_kg: Optional[float]) -> Optional[float]:
    """mL/hr -> mcg/kg/min"""
    if not _guards_pass(rate_ml_hr, concentration, weight_kg):
        return None
    return _finite_ratio(rate_ml_hr * concentration * DRIP_CONSTANTS.MCG_PER_MG,
                         DRIP_CONSTANTS.MINUTES_PER_HOUR * weight_kg)

def rate_from_dose(dose_mcg_kg_min: Optional[float], concentration: Optional[float],
                   weight_kg: Optional[float]) -> Optional[float]:
    """mcg/kg/min -> mL/hr. Exact inverse of dose_from_rate for the same bag and weight."""
    if not _guards_pass(dose_mcg_kg_min, concentration, weight_kg):
        return None
    return _finite_ratio(dose_mcg_kg_min * DRIP_CONSTANTS.MINUTES_PER_HOUR * weight_kg,
                         concentration * DRIP_CONSTANTS.MCG_PER_MG)

class DripCalculator:
    """
    Bidirectional: compute dose from rate, or rate from desired dose,
    for a fixed-concentration bag.
    """

    @staticmethod
    def calc_dose(inputs: DripInputs) -> Optional[float]:
        conc = concentration_mg_ml(inputs.drug_mg, inputs.volume_ml)
        return dose_from_rate(inputs.rate_ml_hr, conc, inputs.weight_kg)

    @staticmethod
    def calc_rate(inputs: DripInputs) -> Optional[float]:
        conc = concentration_mg_ml(inputs.drug_mg, inputs.volume_ml)
        return rate_from_dose(inputs.target_dose_mcg_kg_min, conc, inputs.weight_kg)

    @staticmethod
    def evaluate(inputs: DripInputs) -> DripResults:
        return DripResults(
            concentration_mg_ml=concentration_mg_ml(inputs.drug_mg, inputs.volume_ml),
            dose_mcg_kg_min=DripCalculator.calc_dose(inputs),
            rate_ml_hr=DripCalculator.calc_rate(inputs),
        )

    @staticmethod
    def example_rate(drug_mg: float = DRIP_CONSTANTS.EXAMPLE_DRUG_MG,
                     volume_ml: float = DRIP_CONSTANTS.EXAMPLE_VOLUME_ML,
                     dose_mcg_kg_min: float = DRIP_CONSTANTS.EXAMPLE_DOSE_MCG_KG_MIN,
                     weight_kg: float = DRIP_CONSTANTS.EXAMPLE_WEIGHT_KG) -> Optional[float]:
        """Quick example card: Norepinephrine 4 mg in 250 mL, 0.3 mcg/kg/min at 70 kg."""
        return DripCalculator.calc_rate(DripInputs(
            weight_kg=weight_kg, drug_mg=drug_mg, volume_ml=volume_ml,
            target_dose_mcg_kg_min=dose_mcg_kg_min,
        ))

calc_dose = DripCalculator.calc_dose
calc_rate = DripCalculator.calc_rate
