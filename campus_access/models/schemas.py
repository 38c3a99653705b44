# =======================================================================================
# campus_access/models/schemas.py - Pydantic Models
# =======================================================================================
from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, Field
from .enums import Role, EventKind

EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"

# ========== Users ==========
class RegisterRequest(BaseModel):
    """Registration form."""
    nombre: str = Field(..., min_length=1, max_length=120, description="Display name")
    correo: str = Field(..., max_length=120, pattern=EMAIL_PATTERN, description="Login email")
    codigo_barra: str = Field(..., min_length=1, max_length=64, description="Barcode identifier")
    carrera: str = Field(..., min_length=1, max_length=120, description="Program or affiliation")
    rol: Role = Field(..., description="member | staff | admin")
    contrasena: str = Field(..., min_length=8, max_length=128, description="Plain password, hashed on insert")

class RegisterResponse(BaseModel):
    success: bool = True

class LoginRequest(BaseModel):
    correo: str
    contrasena: str

class UserOut(BaseModel):
    """Public user record; never carries the credential."""
    user_id: Optional[int] = None
    nombre: str
    correo: str
    carrera: Optional[str] = None
    rol: str
    codigo_barra: str

class LoginResponse(BaseModel):
    usuario: UserOut
    token: Optional[str] = None

class UserLookupResponse(BaseModel):
    usuario: UserOut

# ========== Access logs ==========
class AccessRecordRequest(BaseModel):
    # Both optional so missing fields get the same 400 as invalid ones.
    user_code: Optional[str] = None
    event_type: Optional[str] = None

class AccessRecordResponse(BaseModel):
    success: bool = True
    message: str

class AccessLogItem(BaseModel):
    log_id: int
    user_code: str
    event_type: EventKind
    event_timestamp: datetime

class AccessLogPage(BaseModel):
    data: List[AccessLogItem]
    total: int
    page: int
    limit: int

# ========== Health ==========
class HealthResponse(BaseModel):
    status: str                 # "ok" | "error"
    dataAvailable: bool
    message: Optional[str] = None
