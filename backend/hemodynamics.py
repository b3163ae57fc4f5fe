"""
CCU Rounder: Hemodynamics Engine
================================
Indirect Fick profile from whatever the bedside has.
Each rung of the chain fires only when its upstream values exist and pass
their guard; otherwise it returns None and everything downstream stays None.
"""

import math
from typing import Optional, Tuple

from models import HemoInputs, HemoResults
from constants import CLINICAL_CONSTANTS

def _finite(value: Optional[float]) -> Optional[float]:
    """Overflow (inf) or inf/inf (NaN) is treated as no value."""
    if value is None or not math.isfinite(value):
        return None
    return value

class HemodynamicsEngine:
    """
    The Calculation Core.
    Pure static methods: HemoInputs -> HemoResults, no I/O, no hidden state.
    """

    @staticmethod
    def _calculate_bsa(height_cm: Optional[float], weight_kg: Optional[float]) -> Optional[float]:
        """Body Surface Area (m²), Mosteller formula."""
        if height_cm is None or weight_kg is None:
            return None
        if height_cm <= 0 or weight_kg <= 0:
            return None
        return _finite(math.sqrt((height_cm * weight_kg) / CLINICAL_CONSTANTS.MOSTELLER_DIVISOR))

    @staticmethod
    def _calculate_map(systolic: Optional[float], diastolic: Optional[float]) -> Optional[float]:
        if systolic is None or diastolic is None:
            return None
        return _finite(diastolic + (systolic - diastolic) / 3)

    @staticmethod
    def _calculate_mpap(pa_systolic: Optional[float], pa_diastolic: Optional[float]) -> Optional[float]:
        if pa_systolic is None or pa_diastolic is None:
            return None
        return _finite((pa_systolic + 2 * pa_diastolic) / 3)

    @staticmethod
    def _calculate_o2_content(hemoglobin_g_dl: Optional[float], saturation_pct: Optional[float]) -> Optional[float]:
        """O2 content (mL O2/dL). Same equation for arterial and mixed venous blood."""
        if hemoglobin_g_dl is None or saturation_pct is None:
            return None
        return _finite(CLINICAL_CONSTANTS.HUFNER_ML_O2_PER_G_HB * hemoglobin_g_dl * (saturation_pct / 100))

    @staticmethod
    def _calculate_vo2(bsa: Optional[float], measured_vo2: Optional[float] = None) -> Tuple[Optional[float], bool]:
        """
        Oxygen consumption (mL/min).
        A measured value short-circuits the 125 x BSA estimate.
        Returns (vo2, is_measured).
        """
        if measured_vo2 is not None:
            return (measured_vo2 if measured_vo2 > 0 else None), True
        if bsa is None:
            return None, False
        return _finite(CLINICAL_CONSTANTS.VO2_ML_MIN_PER_M2 * bsa), False

    @staticmethod
    def _calculate_cardiac_output(vo2: Optional[float], ca_o2: Optional[float], cv_o2: Optional[float]) -> Optional[float]:
        """
        Fick: CO (L/min) = VO2 / ((CaO2 - CvO2) x 10).
        A non-positive arteriovenous gap is clinically invalid -> None.
        """
        if vo2 is None or ca_o2 is None or cv_o2 is None:
            return None
        delta = ca_o2 - cv_o2
        if not math.isfinite(delta) or delta <= 0:
            return None
        co = _finite(vo2 / (delta * CLINICAL_CONSTANTS.DL_PER_L))
        return co if co is not None and co > 0 else None

    @staticmethod
    def _calculate_cardiac_index(co: Optional[float], bsa: Optional[float]) -> Optional[float]:
        if co is None or bsa is None or bsa <= 0:
            return None
        return _finite(co / bsa)

    @staticmethod
    def _calculate_stroke_volume(co: Optional[float], heart_rate: Optional[float]) -> Optional[float]:
        """mL/beat"""
        if co is None or heart_rate is None or heart_rate <= 0:
            return None
        return _finite((co * CLINICAL_CONSTANTS.ML_PER_L) / heart_rate)

    @staticmethod
    def _calculate_resistance_wu(mean_pressure: Optional[float], downstream_pressure: Optional[float],
                                 co: Optional[float]) -> Optional[float]:
        """
        Resistance (Wood Units) = (mean inflow - downstream pressure) / CO.
        SVR uses MAP - CVP; PVR uses mPAP - PCWP.
        """
        if mean_pressure is None or downstream_pressure is None or co is None or co == 0:
            return None
        return _finite((mean_pressure - downstream_pressure) / co)

    @staticmethod
    def _to_dyn(resistance_wu: Optional[float]) -> Optional[float]:
        if resistance_wu is None:
            return None
        return _finite(CLINICAL_CONSTANTS.WOOD_UNIT_TO_DYN * resistance_wu)

    @staticmethod
    def evaluate(inputs: HemoInputs) -> HemoResults:
        """
        MAIN ENTRY POINT: evaluates the whole dependency graph top to bottom.
        Total function: partial input gives partial output, never an exception.
        """
        calc = HemodynamicsEngine

        # 1. Direct derivations (inputs only)
        bsa = calc._calculate_bsa(inputs.height_cm, inputs.weight_kg)
        map_mmhg = calc._calculate_map(inputs.systolic_bp, inputs.diastolic_bp)
        mpap = calc._calculate_mpap(inputs.pa_systolic_mmhg, inputs.pa_diastolic_mmhg)
        ca_o2 = calc._calculate_o2_content(inputs.hemoglobin_g_dl, inputs.sa_o2_percent)
        cv_o2 = calc._calculate_o2_content(inputs.hemoglobin_g_dl, inputs.sv_o2_percent)

        # 2. Fick
        vo2, vo2_measured = calc._calculate_vo2(bsa, inputs.measured_vo2_ml_min)
        co = calc._calculate_cardiac_output(vo2, ca_o2, cv_o2)

        # 3. Flow-normalised outputs
        ci = calc._calculate_cardiac_index(co, bsa)
        sv = calc._calculate_stroke_volume(co, inputs.heart_rate)

        # 4. Resistances
        svr_wu = calc._calculate_resistance_wu(map_mmhg, inputs.cvp_mmhg, co)
        pvr_wu = calc._calculate_resistance_wu(mpap, inputs.pcwp_mmhg, co)

        return HemoResults(
            bsa_m2=bsa,
            map_mmhg=map_mmhg,
            mpap_mmhg=mpap,
            ca_o2_ml_dl=ca_o2,
            cv_o2_ml_dl=cv_o2,
            vo2_ml_min=vo2,
            cardiac_output_l_min=co,
            cardiac_index_l_min_m2=ci,
            stroke_volume_ml=sv,
            svr_dyn=calc._to_dyn(svr_wu),
            pvr_dyn=calc._to_dyn(pvr_wu),
            pvr_wood_units=pvr_wu,
            vo2_measured=vo2_measured,
        )

def evaluate_hemodynamics(inputs: HemoInputs) -> HemoResults:
    return HemodynamicsEngine.evaluate(inputs)
