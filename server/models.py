# models.py
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Airline(BaseModel):
    """One airline reference record as stored in data/airlines.json."""

    model_config = ConfigDict(frozen=True, extra="allow")

    iata: str = Field(..., description="Two-letter IATA code")
    name: str
    logo: Optional[str] = None
    logo_cdn: Optional[str] = None


class AirlineLogo(BaseModel):
    logo: Optional[str] = None
    logo_cdn: Optional[str] = None
    iata: str
    name: str


class ApiError(BaseModel):
    success: bool = False
    error: str


class AirlineListResponse(BaseModel):
    success: bool = True
    data: List[Airline]


class AirlineResponse(BaseModel):
    success: bool = True
    data: Airline


class AirlineLogoResponse(BaseModel):
    success: bool = True
    data: AirlineLogo


class FrontendConfig(BaseModel):
    apiBaseUrl: str
    environment: str
    stripe_publishable_key: Optional[str] = None
    booking_timer_minutes: int


class UserProfile(BaseModel):
    """Cached user record written by the login flow."""

    model_config = ConfigDict(extra="allow")

    display_name: Optional[str] = None
    email: Optional[str] = None


class ToastKind(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


class Toast(BaseModel):
    message: str
    kind: ToastKind = ToastKind.INFO

    @property
    def timeout_ms(self) -> int:
        # success messages stay longer so they can be read
        return 5000 if self.kind == ToastKind.SUCCESS else 3000


class Redirect(BaseModel):
    location: str
    delay_ms: int = 0
    alert: Optional[str] = None


class SupportTicketRequest(BaseModel):
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)
    subject: str = Field(..., min_length=1)
    booking_reference: Optional[str] = None
    message: str = Field(..., min_length=1)
    priority: str = "normal"

    @field_validator("name", "email", "subject", "message", mode="before")
    @classmethod
    def _strip_required(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("booking_reference", mode="before")
    @classmethod
    def _blank_reference(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip()
        return v or None

    @field_validator("priority", mode="before")
    @classmethod
    def _default_priority(cls, v: Any) -> Any:
        return v or "normal"
