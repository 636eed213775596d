from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Credentials(BaseModel):
    login: str
    secret: str
    service_id: str

    def to_payload(self) -> Dict[str, str]:
        return {
            "control_login": self.login,
            "control_password": self.secret,
            "service": self.service_id,
        }


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise ValueError(f"expected a string or number, got {type(value).__name__}")
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class AccountRecord(BaseModel):
    """One line's status as reported upstream. Numbers stay as the decimal strings upstream sent."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    identifier: str = Field(default="", alias="ID")
    login: str = ""
    postcode: str = ""
    tx_rate: str = ""
    rx_rate: str = ""
    tx_rate_adjusted: str = ""
    quota_monthly: str = ""
    quota_remaining: str = ""
    quota_timestamp: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> str:
        return _as_text(value)


class InfoEnvelope(BaseModel):
    """Outer upstream object. Only ``info`` and ``error`` are read; entries past the first are left raw."""

    model_config = ConfigDict(extra="ignore")

    info: List[Any] = Field(default_factory=list)
    error: str = ""

    @field_validator("error", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> str:
        return _as_text(value)

    @field_validator("info", mode="before")
    @classmethod
    def empty_list(cls, value: Any) -> Any:
        return [] if value is None else value
