# pyicc/config.py
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ICCSettings(BaseSettings):
    """Library-wide defaults for ICC inference"""
    model_config = SettingsConfigDict(
        env_prefix="PYICC_",
        case_sensitive=False,
        # Allow loading from .env files
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        validate_assignment=True,
    )

    alpha: float = Field(
        default=0.05,
        gt=0.0,
        lt=1.0,
        description="Significance level for the two-sided confidence intervals",
        json_schema_extra={"example": 0.01}
    )
    rho0: float = Field(
        default=0.0,
        description="Hypothesised ICC under the null for the F tests"
    )
    residual_tolerance: float = Field(
        default=1e-12,
        ge=0.0,
        description="Negative residual sums of squares smaller than this are treated as zero"
    )

    @field_validator("rho0")
    @classmethod
    def check_rho0(cls, v: float) -> float:
        return validate_rho0(v)


def validate_alpha(alpha: float) -> float:
    """Check an explicit significance level the same way the settings do."""
    if not 0.0 < alpha < 1.0:
        raise ValueError(f"alpha must lie strictly between 0 and 1; got {alpha}")
    return float(alpha)


def validate_rho0(rho0: float) -> float:
    """Check an explicit null-hypothesis ICC the same way the settings do."""
    if not 0.0 <= rho0 < 1.0:
        raise ValueError(f"rho0 must satisfy 0 <= rho0 < 1; got {rho0}")
    return float(rho0)
