from enum import Enum
VERSION = "1.0.0"

class Sex(Enum):
    MALE = "M"
    FEMALE = "F"
    UNSPECIFIED = ""  # Form default ("–" in the picker)

class CLINICAL_CONSTANTS:
    # Mosteller: BSA = sqrt(height_cm * weight_kg / 3600)
    MOSTELLER_DIVISOR = 3600.0

    # Hb-bound O2 only. Dissolved O2 (0.003 * PaO2) is ignored.
    HUFNER_ML_O2_PER_G_HB = 1.34

    # Estimated resting VO2 (mL/min/m²) for the indirect Fick method
    VO2_ML_MIN_PER_M2 = 125.0

    # mmHg·min/L (Wood Units) -> dyn·s·cm⁻⁵
    WOOD_UNIT_TO_DYN = 80.0

    # (CaO2 - CvO2) is per dL; x10 converts to per L
    DL_PER_L = 10.0
    ML_PER_L = 1000.0

class DRIP_CONSTANTS:
    MCG_PER_MG = 1000.0
    MINUTES_PER_HOUR = 60.0

    # "Levo 4 mg in 250 mL, target 0.3 mcg/kg/min at 70 kg"
    EXAMPLE_DRUG_MG = 4.0
    EXAMPLE_VOLUME_ML = 250.0
    EXAMPLE_DOSE_MCG_KG_MIN = 0.3
    EXAMPLE_WEIGHT_KG = 70.0

class STORE_KEYS:
    """One persisted slot per tool."""
    HEMO = "ccu_hemo_v1"
    DRIP = "ccu_drip_v1"

    # Public tool name (URL segment) -> slot key
    BY_TOOL = {"hemo": HEMO, "drip": DRIP}

class DISPLAY_PRECISION:
    """Fixed decimal places per displayed field."""
    PLACEHOLDER = "–"

    HEMO = {
        "bsa_m2": 2,
        "map_mmhg": 1,
        "mpap_mmhg": 1,
        "ca_o2_ml_dl": 2,
        "cv_o2_ml_dl": 2,
        "vo2_ml_min": 0,
        "cardiac_output_l_min": 2,
        "cardiac_index_l_min_m2": 2,
        "stroke_volume_ml": 0,
        "svr_dyn": 0,
        "pvr_dyn": 0,
        "pvr_wood_units": 2,
    }

    DRIP = {
        "concentration_mg_ml": 3,
        "dose_mcg_kg_min": 3,
        "rate_ml_hr": 2,
    }
