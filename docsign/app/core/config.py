"""
Centralized configuration management for the document signing service.

Pydantic v2 settings management to enforce strict validation and
fast-failure on invalid configuration. No key material is ever read
from the environment: keys are always explicit call parameters.
"""

from functools import lru_cache
from typing import Annotated, Literal

from pydantic import Field, StringConstraints
from pydantic_settings import BaseSettings, SettingsConfigDict


# -------------------------------------------------------------------------
# Reusable Type Aliases
# -------------------------------------------------------------------------

EnvLabel = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=1),
]


# -------------------------------------------------------------------------
# Settings Model
# -------------------------------------------------------------------------

class Settings(BaseSettings):
    """
    Application settings parsed from the environment.

    Every field has a safe default so the core can run without any
    environment at all; invalid overrides fail at construction time.
    """

    # ---------------------------------------------------------------------
    # Key generation
    # ---------------------------------------------------------------------

    rsa_key_size: Annotated[
        int,
        Field(
            default=2048,
            ge=2048,
            le=8192,
            description="RSA modulus size in bits for generated key pairs",
        ),
    ]

    # ---------------------------------------------------------------------
    # Descriptive certificate metadata (non-cryptographic)
    # ---------------------------------------------------------------------

    certificate_issuer: Annotated[
        EnvLabel,
        Field(
            default="AgroIA Certificate Authority",
            description="Issuer label recorded in CertificateInfo",
        ),
    ]

    certificate_validity_days: Annotated[
        int,
        Field(
            default=365,
            ge=1,
            description="Length of the descriptive validity window",
        ),
    ]

    # ---------------------------------------------------------------------
    # Document rendering
    # ---------------------------------------------------------------------

    system_name: Annotated[
        EnvLabel,
        Field(
            default="AgroIA",
            description="Name of the generating system shown in footers",
        ),
    ]

    # ---------------------------------------------------------------------
    # Operational Boundaries
    # ---------------------------------------------------------------------

    max_pdf_size_mb: Annotated[
        int,
        Field(
            default=25,
            ge=1,
            le=100,
            description="OOM protection limit for input documents",
        ),
    ]

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="DOCSIGN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
    )

    @property
    def max_pdf_size_bytes(self) -> int:
        return self.max_pdf_size_mb * 1024 * 1024


# -------------------------------------------------------------------------
# Settings Dependency Provider
# -------------------------------------------------------------------------

@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Dependency injection provider for application settings.

    Parsed once per process; also usable as a FastAPI dependency.
    """
    return Settings()
