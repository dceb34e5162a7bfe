"""Import pipeline data models."""

from typing import Any, Optional

from pydantic import BaseModel, Field

from tradejournal.models.trade import Trade, TradeInput


class FieldError(BaseModel):
    """A single field that failed normalization or validation."""

    field: str = Field(..., description="Canonical field name")
    message: str = Field(..., description="What is wrong with the value")
    value: Optional[Any] = Field(default=None, description="Offending value")

    model_config = {"frozen": True}


class RowError(BaseModel):
    """A CSV row excluded from an import."""

    row: int = Field(..., ge=1, description="1-based file row (header is row 1)")
    error: str = Field(..., description="Error message")
    data: dict[str, str] = Field(default_factory=dict, description="Original raw row")

    model_config = {"frozen": True}


class NormalizedRow(BaseModel):
    """A broker row mapped onto canonical field names."""

    values: dict[str, Any] = Field(default_factory=dict, description="Canonical values")
    errors: list[FieldError] = Field(default_factory=list, description="Coercion failures")

    model_config = {"frozen": True}

    @property
    def ok(self) -> bool:
        return not self.errors


class ValidationResult(BaseModel):
    """Outcome of validating a candidate trade."""

    trade: Optional[TradeInput] = Field(default=None, description="Validated trade")
    errors: list[FieldError] = Field(default_factory=list, description="Field errors")

    model_config = {"frozen": True}

    @property
    def ok(self) -> bool:
        return self.trade is not None and not self.errors


class PatchResult(BaseModel):
    """Outcome of validating a partial update."""

    changes: dict[str, Any] = Field(default_factory=dict, description="Validated changes")
    errors: list[FieldError] = Field(default_factory=list, description="Field errors")

    model_config = {"frozen": True}

    @property
    def ok(self) -> bool:
        return not self.errors


class ImportReport(BaseModel):
    """Summary of a CSV import."""

    imported: int = Field(default=0, ge=0, description="Trades created")
    failed: int = Field(default=0, ge=0, description="Rows rejected")
    skipped: int = Field(default=0, ge=0, description="Rows dropped for column mismatch")
    error_details: list[RowError] = Field(
        default_factory=list, description="Capped sample of rejected rows"
    )
    trades: list[Trade] = Field(default_factory=list, description="Created trades")

    model_config = {"frozen": True}
