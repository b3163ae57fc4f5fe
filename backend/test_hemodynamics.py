import unittest
import math
from dataclasses import replace

from hemodynamics import HemodynamicsEngine, evaluate_hemodynamics
from models import HemoInputs, HemoResults
from constants import Sex

# Which raw inputs each output ultimately depends on
FICK_INPUTS = ['height_cm', 'weight_kg', 'hemoglobin_g_dl', 'sa_o2_percent', 'sv_o2_percent']
DEPENDENCIES = {
    'bsa_m2': ['height_cm', 'weight_kg'],
    'map_mmhg': ['systolic_bp', 'diastolic_bp'],
    'mpap_mmhg': ['pa_systolic_mmhg', 'pa_diastolic_mmhg'],
    'ca_o2_ml_dl': ['hemoglobin_g_dl', 'sa_o2_percent'],
    'cv_o2_ml_dl': ['hemoglobin_g_dl', 'sv_o2_percent'],
    'vo2_ml_min': ['height_cm', 'weight_kg'],
    'cardiac_output_l_min': FICK_INPUTS,
    'cardiac_index_l_min_m2': FICK_INPUTS,
    'stroke_volume_ml': FICK_INPUTS + ['heart_rate'],
    'svr_dyn': FICK_INPUTS + ['systolic_bp', 'diastolic_bp', 'cvp_mmhg'],
    'pvr_dyn': FICK_INPUTS + ['pa_systolic_mmhg', 'pa_diastolic_mmhg', 'pcwp_mmhg'],
    'pvr_wood_units': FICK_INPUTS + ['pa_systolic_mmhg', 'pa_diastolic_mmhg', 'pcwp_mmhg'],
}

class TestHemodynamicsEngine(unittest.TestCase):

    def setUp(self):
        """Standard 70kg adult with a full right-heart cath set."""
        self.full = HemoInputs(
            sex=Sex.MALE,
            height_cm=170.0, weight_kg=70.0,
            hemoglobin_g_dl=14.0, heart_rate=80.0,
            systolic_bp=120.0, diastolic_bp=80.0, cvp_mmhg=8.0,
            pa_systolic_mmhg=40.0, pa_diastolic_mmhg=20.0, pcwp_mmhg=12.0,
            sa_o2_percent=98.0, sv_o2_percent=70.0,
        )
        self.res = evaluate_hemodynamics(self.full)

    def test_01_reference_values(self):
        """Textbook values for the standard patient."""
        self.assertAlmostEqual(self.res.bsa_m2, 1.818, places=3)
        self.assertAlmostEqual(self.res.map_mmhg, 93.33, places=2)
        self.assertAlmostEqual(self.res.mpap_mmhg, 26.67, places=2)
        self.assertAlmostEqual(self.res.ca_o2_ml_dl, 1.34 * 14 * 0.98, places=9)
        self.assertAlmostEqual(self.res.cv_o2_ml_dl, 1.34 * 14 * 0.70, places=9)
        self.assertAlmostEqual(self.res.vo2_ml_min, 125 * math.sqrt(170 * 70 / 3600), places=9)
        self.assertFalse(self.res.vo2_measured)

    def test_02_fick_chain(self):
        """CO, CI, SV and resistances follow from the same Fick output."""
        bsa = math.sqrt(170 * 70 / 3600)
        co = (125 * bsa) / ((1.34 * 14 * 0.98 - 1.34 * 14 * 0.70) * 10)
        print(f"\nFick CO: {self.res.cardiac_output_l_min:.2f} L/min (expected {co:.2f})")

        self.assertGreater(self.res.cardiac_output_l_min, 0)
        self.assertAlmostEqual(self.res.cardiac_output_l_min, co, places=9)
        self.assertAlmostEqual(self.res.cardiac_index_l_min_m2, co / bsa, places=9)
        self.assertAlmostEqual(self.res.stroke_volume_ml, co * 1000 / 80, places=6)

        map_mmhg = 80 + (120 - 80) / 3
        mpap = (40 + 2 * 20) / 3
        self.assertAlmostEqual(self.res.svr_dyn, 80 * (map_mmhg - 8) / co, places=6)
        self.assertAlmostEqual(self.res.pvr_dyn, 80 * (mpap - 12) / co, places=6)
        self.assertAlmostEqual(self.res.pvr_wood_units, (mpap - 12) / co, places=9)
        self.assertAlmostEqual(self.res.pvr_dyn, 80 * self.res.pvr_wood_units, places=6)

    def test_03_empty_form(self):
        """Nothing entered -> nothing derived."""
        self.assertEqual(evaluate_hemodynamics(HemoInputs()), HemoResults())

    def test_04_missing_input_propagates(self):
        """Removing any required input (direct or upstream) blanks the output."""
        for output, required in DEPENDENCIES.items():
            for field_name in required:
                with self.subTest(output=output, missing=field_name):
                    res = evaluate_hemodynamics(replace(self.full, **{field_name: None}))
                    self.assertIsNone(getattr(res, output))

    def test_05_partial_input_partial_output(self):
        """Pressures alone still give MAP and mPAP, nothing flow-based."""
        res = evaluate_hemodynamics(HemoInputs(
            systolic_bp=120.0, diastolic_bp=80.0,
            pa_systolic_mmhg=40.0, pa_diastolic_mmhg=20.0,
        ))
        self.assertIsNotNone(res.map_mmhg)
        self.assertIsNotNone(res.mpap_mmhg)
        self.assertIsNone(res.bsa_m2)
        self.assertIsNone(res.cardiac_output_l_min)
        self.assertIsNone(res.svr_dyn)

    def test_06_invalid_av_gap(self):
        """SvO2 >= SaO2 is clinically invalid: no CO and nothing downstream of it."""
        for sv_o2 in (98.0, 99.0):
            with self.subTest(sv_o2=sv_o2):
                res = evaluate_hemodynamics(replace(self.full, sv_o2_percent=sv_o2))
                self.assertIsNotNone(res.ca_o2_ml_dl)
                self.assertIsNotNone(res.cv_o2_ml_dl)
                self.assertIsNone(res.cardiac_output_l_min)
                self.assertIsNone(res.cardiac_index_l_min_m2)
                self.assertIsNone(res.stroke_volume_ml)
                self.assertIsNone(res.svr_dyn)
                self.assertIsNone(res.pvr_wood_units)

    def test_07_zero_denominators(self):
        """Zero HR / zero or negative BSA inputs give None, never inf or NaN."""
        res = evaluate_hemodynamics(replace(self.full, heart_rate=0.0))
        self.assertIsNone(res.stroke_volume_ml)
        self.assertIsNotNone(res.cardiac_output_l_min)

        for height in (0.0, -170.0):
            with self.subTest(height=height):
                res = evaluate_hemodynamics(replace(self.full, height_cm=height))
                self.assertIsNone(res.bsa_m2)
                self.assertIsNone(res.vo2_ml_min)
                self.assertIsNone(res.cardiac_index_l_min_m2)

        self.assertIsNone(HemodynamicsEngine._calculate_cardiac_index(4.0, 0.0))
        self.assertIsNone(HemodynamicsEngine._calculate_resistance_wu(90.0, 8.0, 0.0))
        self.assertIsNone(HemodynamicsEngine._calculate_cardiac_output(0.0, 18.0, 13.0))

    def test_08_zero_cvp_is_a_value(self):
        """CVP of 0 mmHg is a real reading, not a missing one."""
        res = evaluate_hemodynamics(replace(self.full, cvp_mmhg=0.0))
        self.assertIsNotNone(res.svr_dyn)
        self.assertGreater(res.svr_dyn, self.res.svr_dyn)

    def test_09_measured_vo2_override(self):
        """A measured VO2 replaces the 125 x BSA estimate, even without height."""
        res = evaluate_hemodynamics(replace(self.full, measured_vo2_ml_min=250.0, height_cm=None))
        self.assertTrue(res.vo2_measured)
        self.assertEqual(res.vo2_ml_min, 250.0)
        self.assertIsNotNone(res.cardiac_output_l_min)
        self.assertIsNone(res.cardiac_index_l_min_m2)  # still needs BSA

        res = evaluate_hemodynamics(replace(self.full, measured_vo2_ml_min=0.0))
        self.assertIsNone(res.vo2_ml_min)
        self.assertIsNone(res.cardiac_output_l_min)

    def test_10_pure_and_idempotent(self):
        self.assertEqual(evaluate_hemodynamics(self.full), evaluate_hemodynamics(self.full))
        self.assertEqual(HemodynamicsEngine.evaluate(self.full), self.res)

    def test_11_no_nan_or_inf(self):
        """Every present output is a finite number."""
        for inputs in (self.full, replace(self.full, cvp_mmhg=200.0), replace(self.full, heart_rate=1e-9)):
            res = evaluate_hemodynamics(inputs)
            for name, value in res.to_dict().items():
                if name == 'vo2_measured' or value is None:
                    continue
                with self.subTest(field=name):
                    self.assertTrue(math.isfinite(value))

    def test_12_extreme_inputs_never_overflow(self):
        """Overflowing or subnormal inputs give None rather than inf, NaN or a bogus 0."""
        extremes = {
            "huge_anthropometrics": replace(self.full, height_cm=1e308, weight_kg=1e308),
            "subnormal_hb": replace(self.full, hemoglobin_g_dl=1e-320),
            "huge_pressures": replace(self.full, systolic_bp=1e308, diastolic_bp=-1e308,
                                      pa_systolic_mmhg=1e308, pa_diastolic_mmhg=1e308),
            "subnormal_hr": replace(self.full, heart_rate=1e-320),
            "huge_measured_vo2": replace(self.full, measured_vo2_ml_min=1e308),
        }
        for label, inputs in extremes.items():
            res = evaluate_hemodynamics(inputs)
            for name, value in res.to_dict().items():
                if name == 'vo2_measured' or value is None:
                    continue
                with self.subTest(case=label, field=name):
                    self.assertTrue(math.isfinite(value))

        res = evaluate_hemodynamics(extremes["huge_anthropometrics"])
        self.assertIsNone(res.bsa_m2)
        self.assertIsNone(res.cardiac_output_l_min)
        self.assertIsNone(res.cardiac_index_l_min_m2)

        res = evaluate_hemodynamics(extremes["subnormal_hb"])
        self.assertIsNone(res.cardiac_output_l_min)
        self.assertIsNone(res.svr_dyn)
        self.assertIsNone(res.pvr_wood_units)

        res = evaluate_hemodynamics(extremes["huge_pressures"])
        self.assertIsNone(res.map_mmhg)
        self.assertIsNone(res.mpap_mmhg)
        self.assertIsNone(res.svr_dyn)

        self.assertIsNone(evaluate_hemodynamics(extremes["subnormal_hr"]).stroke_volume_ml)

if __name__ == '__main__':
    unittest.main()
