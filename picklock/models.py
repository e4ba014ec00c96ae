"""
Pydantic models for request/response validation.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from picklock.config import MAX_ITERATIONS_CEILING


# ============================================================================
# Analysis Models
# ============================================================================

class AnalysisRequest(BaseModel):
    """Request model for analyzing an RSA public key."""

    public_key_pem: Optional[str] = Field(
        default=None,
        min_length=1,
        description="PEM-encoded RSA public key",
        examples=["-----BEGIN PUBLIC KEY-----\n...\n-----END PUBLIC KEY-----"]
    )

    e: Optional[str] = Field(
        default=None,
        pattern=r"^[0-9]+$",
        description="Public exponent as a decimal string",
        examples=["65537"]
    )

    n: Optional[str] = Field(
        default=None,
        pattern=r"^[0-9]+$",
        description="Modulus as a decimal string",
        examples=["63648259"]
    )

    max_iterations: Optional[int] = Field(
        default=None,
        ge=0,
        le=MAX_ITERATIONS_CEILING,
        description="Override the configured iteration cap"
    )

    include_pem: bool = Field(
        default=False,
        description="Also return the private exponent armored as PEM"
    )

    @model_validator(mode='after')
    def validate_key_source(self) -> "AnalysisRequest":
        """Require either a PEM key or both e and n, not both."""
        has_numbers = self.e is not None or self.n is not None
        if self.public_key_pem is not None and has_numbers:
            raise ValueError('Provide either public_key_pem or e and n, not both')
        if self.public_key_pem is None and (self.e is None or self.n is None):
            raise ValueError('Provide public_key_pem, or both e and n')
        return self


class AnalysisResponse(BaseModel):
    """Response model for a key analysis."""

    status: str = Field(
        ...,
        description="Analysis outcome",
        examples=["cracked", "resisted"]
    )

    strategy: str = Field(
        ...,
        description="Search strategy used",
        examples=["weak", "strong"]
    )

    modulus_bits: int = Field(..., description="Bit length of the modulus")

    max_iterations: int = Field(..., description="Iteration cap applied")

    private_exponent: Optional[str] = Field(
        default=None,
        description="Recovered private exponent (decimal) if cracked"
    )

    private_key_pem: Optional[str] = Field(
        default=None,
        description="Private exponent bytes armored as PEM, if requested"
    )

    reason: Optional[str] = Field(
        default=None,
        description="Failure kind if the key resisted",
        examples=["FactorizationFailed", "SearchExhausted", "NoInverseExists"]
    )

    detail: Optional[str] = Field(default=None, description="Failure details")


# ============================================================================
# Health Models
# ============================================================================

class HealthStatus(BaseModel):
    """Health check response."""

    status: str
    version: str
    uptime_seconds: float
    timestamp: datetime
