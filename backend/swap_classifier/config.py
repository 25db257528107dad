"""Configuration management for the application."""
from decimal import Decimal
from typing import FrozenSet, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from swap_classifier.utils.constants import DEFAULT_CORE_TOKENS, canonical_mint
from swap_classifier.utils.errors import ConfigurationError


class RentRefundParams(BaseModel):
    """Tuning for the rent-refund heuristic."""
    model_config = ConfigDict(frozen=True)

    max_sol: Decimal = Field(default=Decimal("0.01"), description="Exclusive upper bound for a rent-refund SOL row")
    require_lifecycle: bool = Field(default=True, description="Require an account open/close pairing")
    rent_exempt_reserves_lamports: Tuple[int, ...] = Field(
        default=(2039280, 890880),
        description="Known rent-exempt reserves (token account, system account)",
    )
    reserve_tolerance_lamports: int = Field(default=5000, ge=0)


class ClassifierConfig(BaseModel):
    """Immutable configuration threaded into the classifier."""
    model_config = ConfigDict(frozen=True)

    core_token_mints: FrozenSet[str] = Field(default=frozenset(DEFAULT_CORE_TOKENS))
    minimum_value_threshold_usd: Decimal = Field(default=Decimal("2"))
    rent_refund: RentRefundParams = Field(default_factory=RentRefundParams)
    dust_threshold: Decimal = Field(default=Decimal("0.000001"))

    @field_validator("core_token_mints", mode="before")
    @classmethod
    def _canonicalize_core(cls, v):
        mints = frozenset(canonical_mint(str(m).strip()) for m in v if str(m).strip())
        if not mints:
            raise ValueError("core_token_mints must not be empty")
        return mints

    @field_validator("minimum_value_threshold_usd", "dust_threshold")
    @classmethod
    def _non_negative(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise ValueError("threshold must be non-negative")
        return v

    def is_core(self, mint: str) -> bool:
        return canonical_mint(mint) in self.core_token_mints


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # API Configuration
    api_title: str = "Swap Classifier API"
    api_version: str = "1.0.0"
    api_prefix: str = "/api/v1"

    # CORS Configuration
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]

    # Classifier Configuration
    core_token_mints: list[str] = list(DEFAULT_CORE_TOKENS)
    minimum_value_threshold_usd: Decimal = Decimal("2")
    dust_threshold: Decimal = Decimal("0.000001")

    # Rent refund heuristic
    rent_refund_max_sol: Decimal = Decimal("0.01")
    rent_refund_require_lifecycle: bool = True
    rent_exempt_reserves_lamports: list[int] = [2039280, 890880]

    # Database Configuration
    database_url: str = "sqlite:///./swap_classifier.db"

    # Application Limits
    max_batch_size: int = 100

    log_level: str = "INFO"

    def classifier_config(self) -> ClassifierConfig:
        """Build the immutable classifier configuration."""
        try:
            return ClassifierConfig(
                core_token_mints=self.core_token_mints,
                minimum_value_threshold_usd=self.minimum_value_threshold_usd,
                dust_threshold=self.dust_threshold,
                rent_refund=RentRefundParams(
                    max_sol=self.rent_refund_max_sol,
                    require_lifecycle=self.rent_refund_require_lifecycle,
                    rent_exempt_reserves_lamports=tuple(self.rent_exempt_reserves_lamports),
                ),
            )
        except ValueError as e:
            raise ConfigurationError(f"Invalid classifier configuration: {e}") from e


settings = Settings()
