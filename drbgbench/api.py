# api.py
import base64
import binascii
import logging
import threading
import uuid
from typing import Dict, List, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from .config import get_settings
from .drbg import MECHANISMS, ReseedRequiredError, new_drbg, new_seed

logger = logging.getLogger(__name__)

# ========= Models =========
class CreateRequest(BaseModel):
    mechanism: str = Field("HMAC-DRBG", description="CTR-DRBG, Hash-DRBG or HMAC-DRBG (or ctr/hash/hmac)")
    seed: Optional[str] = Field(None, description="base64-encoded seed; drawn from os.urandom when omitted")

class GenerateRequest(BaseModel):
    numBits: int = Field(..., ge=0)

class ReseedRequest(BaseModel):
    seed: Optional[str] = Field(None, description="base64-encoded seed; drawn from os.urandom when omitted")

class DrbgInfo(BaseModel):
    drbgId: str
    name: str
    stateSize: int
    reseedCounter: int

class GenerateResponse(BaseModel):
    drbgId: str
    numBits: int
    output: str  # base64
    reseedCounter: int

class MechanismInfo(BaseModel):
    name: str
    stateSize: int

# ========= State =========
class _Slot:
    """One generator plus the lock that serialises calls on it."""

    def __init__(self, drbg):
        self.drbg = drbg
        self.lock = threading.Lock()

GENERATORS: Dict[str, _Slot] = {}

# ========= Helpers =========
def b64decode_seed(b64: Optional[str], size: int) -> bytes:
    if b64 is None:
        return new_seed(size)
    try:
        return base64.b64decode(b64, validate=True)
    except (binascii.Error, ValueError):
        raise HTTPException(status_code=400, detail="Invalid base64 in 'seed'.")

def get_slot(drbg_id: str) -> _Slot:
    slot = GENERATORS.get(drbg_id)
    if slot is None:
        raise HTTPException(404, f"drbgId {drbg_id} not found")
    return slot

def info(drbg_id: str, slot: _Slot) -> DrbgInfo:
    with slot.lock:
        return DrbgInfo(
            drbgId=drbg_id,
            name=slot.drbg.name(),
            stateSize=slot.drbg.state_size(),
            reseedCounter=slot.drbg.reseed_counter,
        )

# ========= App =========
app = FastAPI(title="DRBG Service", version="1.0")
app.state.settings = get_settings()

@app.get("/")
def root():
    return {
        "status": "ok",
        "message": "DRBG service is running. Interactive docs at /docs",
        "docs": "/docs",
    }

@app.get("/v1/mechanisms", response_model=List[MechanismInfo])
def mechanisms():
    out = []
    for cls in MECHANISMS:
        drbg = cls(b"")
        out.append(MechanismInfo(name=drbg.name(), stateSize=drbg.state_size()))
    return out

# ---- /v1/drbg ----
@app.post("/v1/drbg", response_model=DrbgInfo, status_code=201)
def create(req: CreateRequest):
    settings = app.state.settings
    seed = b64decode_seed(req.seed, settings.seed_size)
    try:
        drbg = new_drbg(req.mechanism, seed, reseed_interval=settings.reseed_interval)
    except ValueError as e:
        raise HTTPException(400, str(e))
    drbg_id = f"d_{uuid.uuid4().hex[:8]}"
    GENERATORS[drbg_id] = _Slot(drbg)
    logger.info("created %s as %s", drbg.name(), drbg_id)
    return info(drbg_id, GENERATORS[drbg_id])

@app.get("/v1/drbg/{drbg_id}", response_model=DrbgInfo)
def describe(drbg_id: str):
    return info(drbg_id, get_slot(drbg_id))

@app.post("/v1/drbg/{drbg_id}/generate", response_model=GenerateResponse)
def generate(drbg_id: str, req: GenerateRequest):
    limit = app.state.settings.max_api_bits
    if req.numBits > limit:
        raise HTTPException(400, f"numBits exceeds the limit of {limit}")
    slot = get_slot(drbg_id)
    with slot.lock:
        try:
            data = slot.drbg.generate(req.numBits)
        except ReseedRequiredError as e:
            raise HTTPException(409, str(e))
        counter = slot.drbg.reseed_counter
    return GenerateResponse(
        drbgId=drbg_id,
        numBits=req.numBits,
        output=base64.b64encode(data).decode(),
        reseedCounter=counter,
    )

@app.post("/v1/drbg/{drbg_id}/reseed", response_model=DrbgInfo)
def reseed(drbg_id: str, req: ReseedRequest):
    slot = get_slot(drbg_id)
    seed = b64decode_seed(req.seed, app.state.settings.seed_size)
    with slot.lock:
        slot.drbg.reseed(seed)
    return info(drbg_id, slot)

@app.delete("/v1/drbg/{drbg_id}", status_code=204)
def delete(drbg_id: str):
    get_slot(drbg_id)
    GENERATORS.pop(drbg_id, None)
