# main.py

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional, Union

from fastapi import FastAPI, HTTPException, Request, Depends
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError

# Import Data Models & Logic
from models import HemoInputs, DripInputs, UnknownFormError
from hemodynamics import evaluate_hemodynamics
from drip import DripCalculator
from formatting import format_hemo_results, format_drip_results
from store import FormStore, RECORD_TYPES, slot_for_tool
from constants import VERSION, STORE_KEYS

# --- 1. CONFIGURATION & LOGGING ---
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("ccu-rounder-api")

# Raw form value: any JSON the client sends. Only numbers or numeric text survive parsing;
# booleans, lists and objects become absent like any other garbage.
FormValue = Optional[Any]

# --- 2. INPUT SCHEMAS (Raw form fields, never rejected) ---
class HemoFormRequest(BaseModel):
    sex: FormValue = Field(None, description="'M', 'F' or blank")
    height_cm: FormValue = Field(None, description="Height (cm)")
    weight_kg: FormValue = Field(None, description="Weight (kg)")
    hemoglobin_g_dl: FormValue = Field(None, description="Hemoglobin (g/dL)")
    heart_rate: FormValue = Field(None, description="Heart Rate (bpm)")
    systolic_bp: FormValue = Field(None, description="SBP (mmHg)")
    diastolic_bp: FormValue = Field(None, description="DBP (mmHg)")
    cvp_mmhg: FormValue = Field(None, description="CVP (mmHg)")
    pa_systolic_mmhg: FormValue = Field(None, description="PASP (mmHg)")
    pa_diastolic_mmhg: FormValue = Field(None, description="PADP (mmHg)")
    pcwp_mmhg: FormValue = Field(None, description="PCWP (mmHg)")
    sa_o2_percent: FormValue = Field(None, description="SaO2, arterial (%)")
    sv_o2_percent: FormValue = Field(None, description="SvO2, mixed venous (%)")
    measured_vo2_ml_min: FormValue = Field(None, description="Measured VO2 (mL/min); overrides 125 x BSA")

    model_config = {
        "json_schema_extra": {
            "example": {
                "sex": "M", "height_cm": "170", "weight_kg": "70", "hemoglobin_g_dl": "14",
                "heart_rate": "80", "systolic_bp": "120", "diastolic_bp": "80", "cvp_mmhg": "8",
                "pa_systolic_mmhg": "40", "pa_diastolic_mmhg": "20", "pcwp_mmhg": "12",
                "sa_o2_percent": "98", "sv_o2_percent": "70"
            }
        }
    }

class DripFormRequest(BaseModel):
    weight_kg: FormValue = Field(None, description="Patient weight (kg)")
    drug_mg: FormValue = Field(None, description="Drug in bag (mg)")
    volume_ml: FormValue = Field(None, description="Diluent volume (mL)")
    rate_ml_hr: FormValue = Field(None, description="Infusion rate (mL/hr)")
    target_dose_mcg_kg_min: FormValue = Field(None, description="Target dose (mcg/kg/min)")

    model_config = {
        "json_schema_extra": {
            "example": {
                "weight_kg": "70", "drug_mg": "4", "volume_ml": "250",
                "rate_ml_hr": "10", "target_dose_mcg_kg_min": "0.3"
            }
        }
    }

FORM_REQUESTS = {STORE_KEYS.HEMO: HemoFormRequest, STORE_KEYS.DRIP: DripFormRequest}

# --- 3. RESPONSE SCHEMAS ---
class HemoResponse(BaseModel):
    results: Dict[str, Union[float, bool, None]]
    display: Dict[str, str]

class DripResponse(BaseModel):
    results: Dict[str, Optional[float]]
    display: Dict[str, str]
    example_rate_ml_hr: Optional[float] = None

class FormResponse(BaseModel):
    tool: str
    inputs: Dict[str, Union[float, str, None]]

# --- 4. APP FACTORY ---
def get_store(request: Request) -> FormStore:
    return request.app.state.store

def create_app(store: Optional[FormStore] = None) -> FastAPI:

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Open the default SQLite store on startup unless one was injected."""
        if getattr(app.state, "store", None) is None:
            app.state.store = FormStore()
        yield

    app = FastAPI(
        title="CCU Rounder API",
        version=VERSION,
        description="Fick-estimate hemodynamics and vasopressor drip conversions. \n\n"
                    "**WARNING**: Educational use only. Verify against clinical standards "
                    "& pump programming guidelines.",
        lifespan=lifespan,
    )
    app.state.store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    def read_root():
        return {"status": "active", "message": "CCU Rounder API is running successfully!"}

    @app.get("/health")
    def health_check():
        """Health Probe"""
        return {"status": "active", "version": VERSION, "module": "ccu-rounder"}

    # --- 5. CALCULATION ENDPOINTS ---

    @app.post("/hemodynamics", response_model=HemoResponse)
    def calculate_hemodynamics(form: HemoFormRequest):
        """
        Hemodynamic Interpreter (Fick estimate).
        Missing values are okay: every output is computed only when its inputs exist.
        """
        inputs = HemoInputs.from_form(form.model_dump())
        results = evaluate_hemodynamics(inputs)
        logger.info(f"Hemodynamics: CO={results.cardiac_output_l_min}, VO2 measured={results.vo2_measured}")
        return {"results": results.to_dict(), "display": format_hemo_results(results)}

    @app.post("/drip", response_model=DripResponse)
    def calculate_drip(form: DripFormRequest):
        """Bidirectional: dose from rate, and rate from target dose."""
        inputs = DripInputs.from_form(form.model_dump())
        results = DripCalculator.evaluate(inputs)
        logger.info(f"Drip: conc={results.concentration_mg_ml}, dose={results.dose_mcg_kg_min}, rate={results.rate_ml_hr}")
        return {
            "results": results.to_dict(),
            "display": format_drip_results(results),
            "example_rate_ml_hr": DripCalculator.example_rate(),
        }

    # --- 6. SAVED FORM ENDPOINTS ---

    @app.get("/forms/{tool}", response_model=FormResponse)
    def load_form(tool: str, store: FormStore = Depends(get_store)):
        try:
            record = store.load(slot_for_tool(tool))
        except UnknownFormError:
            raise HTTPException(status_code=404, detail=f"Unknown form '{tool}'")
        except SQLAlchemyError as e:
            logger.error(f"Form store failure: {str(e)}", exc_info=True)
            raise HTTPException(status_code=500, detail="Form store unavailable")
        return {"tool": tool, "inputs": record.to_dict()}

    @app.put("/forms/{tool}", response_model=FormResponse)
    def save_form(tool: str, payload: Dict[str, Any], store: FormStore = Depends(get_store)):
        """Overwrites the saved form. Raw values are parsed; garbage is stored as absent."""
        try:
            key = slot_for_tool(tool)
        except UnknownFormError:
            raise HTTPException(status_code=404, detail=f"Unknown form '{tool}'")

        form = FORM_REQUESTS[key].model_validate(payload)
        record = RECORD_TYPES[key].from_form(form.model_dump())
        try:
            store.save(key, record)
        except SQLAlchemyError as e:
            logger.error(f"Form store failure: {str(e)}", exc_info=True)
            raise HTTPException(status_code=500, detail="Form store unavailable")
        return {"tool": tool, "inputs": record.to_dict()}

    @app.delete("/forms")
    def clear_forms(store: FormStore = Depends(get_store)):
        """Clear all: both forms back to empty, both saved slots removed."""
        try:
            store.clear()
        except SQLAlchemyError as e:
            logger.error(f"Form store failure: {str(e)}", exc_info=True)
            raise HTTPException(status_code=500, detail="Form store unavailable")
        return {
            "hemo": HemoInputs().to_dict(),
            "drip": DripInputs().to_dict(),
        }

    return app

app = create_app()
