from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Any, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def to_wire_name(field_name: str) -> str:
    """camelCase with the HT (hors taxes) suffix kept upper-case: office_rent_ht -> officeRentHT."""
    name = to_camel(field_name)
    if field_name.endswith("_ht"):
        return name[:-2] + "HT"
    return name


class _CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire (both accepted on input)."""
    model_config = ConfigDict(alias_generator=to_wire_name, populate_by_name=True, frozen=True)


class PaymentFrequency(str, Enum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"

    @property
    def months_per_period(self) -> int:
        return 1 if self is PaymentFrequency.MONTHLY else 3

    @property
    def periods_per_year(self) -> int:
        return 12 // self.months_per_period


class KnownIndexPoint(_CamelModel):
    """Date from which a new index value applies."""
    model_config = ConfigDict(extra="forbid")

    effective_date: date
    index_value: float = Field(gt=0.0)


class ScheduleInput(_CamelModel):
    """
    Key terms of a lease, as handed to the rent schedule calculator.

    Amounts are HT per full billing period. Optional components default to 0.
    """

    model_config = ConfigDict(extra="forbid")

    start_date: date
    end_date: date
    payment_frequency: PaymentFrequency
    base_index_value: float = Field(gt=0.0, description="Index value in effect at start_date")
    known_index_points: List[KnownIndexPoint] = Field(default_factory=list)

    office_rent_ht: Optional[float] = Field(default=None, ge=0.0)
    parking_rent_ht: Optional[float] = Field(default=None, ge=0.0)
    charges_ht: Optional[float] = Field(default=None, ge=0.0)
    taxes_ht: Optional[float] = Field(default=None, ge=0.0)
    other_costs_ht: Optional[float] = Field(default=None, ge=0.0)

    charges_growth_rate: Optional[float] = Field(
        default=None,
        gt=-1.0,
        description="Annual growth of charges, taxes and other costs (e.g. 0.02 for 2%)",
    )
    deposit_months: Optional[float] = Field(default=None, ge=0.0)
    franchise_months: Optional[int] = Field(default=None, ge=0)
    incentive_amount: Optional[float] = Field(default=None, ge=0.0)
    horizon_years: Optional[float] = Field(default=None, gt=0.0)

    @field_validator("payment_frequency", mode="before")
    @classmethod
    def normalize_payment_frequency(cls, v: Any) -> Any:
        """Accept casing variants ('Quarterly', ' MONTHLY ')."""
        if isinstance(v, str):
            return v.strip().lower()
        return v


class RentSchedulePeriod(_CamelModel):
    """One billing period of the projected schedule."""
    period_start: date
    period_end: date
    period_type: Literal["month", "quarter"]
    year: int
    month: Optional[int] = None
    quarter: Optional[int] = None
    index_value: float
    index_factor: float
    office_rent_ht: float = 0.0
    parking_rent_ht: float = 0.0
    charges_ht: float = 0.0
    taxes_ht: float = 0.0
    other_costs_ht: float = 0.0
    franchise_ht: float = 0.0
    incentives_ht: float = 0.0
    net_rent_ht: float = 0.0


class YearlyTotalSummary(_CamelModel):
    year: int
    base_rent_ht: float = 0.0
    charges_ht: float = 0.0
    franchise_ht: float = 0.0
    incentives_ht: float = 0.0
    net_rent_ht: float = 0.0


class BoundaryCondition(_CamelModel):
    """A degenerate input the engine resolved by clamping rather than failing."""
    code: str
    period_start: Optional[date] = None
    message: str = ""
    requested: float = 0.0
    applied: float = 0.0


class ScheduleSummary(_CamelModel):
    yearly_totals: List[YearlyTotalSummary] = Field(default_factory=list)
    total_base_rent_ht: float = 0.0
    total_charges_ht: float = 0.0
    total_net_rent_ht: float = 0.0
    deposit_ht: float = 0.0
    tcam: float = 0.0
    boundary_conditions: List[BoundaryCondition] = Field(default_factory=list)


class ComputeLeaseRentScheduleResult(_CamelModel):
    summary: ScheduleSummary
    schedule: List[RentSchedulePeriod] = Field(default_factory=list)


# ---- Lease extraction record (produced upstream by the LLM pipeline) ----


ConfidenceLevel = Literal["high", "medium", "low", "missing"]


class ExtractedValue(_CamelModel):
    """Single extracted field with its confidence level and page reference."""
    value: Optional[Any] = None
    confidence: ConfidenceLevel = "missing"
    source: Optional[str] = None


def _missing() -> ExtractedValue:
    return ExtractedValue()


class CalendarData(_CamelModel):
    signature_date: ExtractedValue = Field(default_factory=_missing)
    effective_date: ExtractedValue = Field(default_factory=_missing)
    end_date: ExtractedValue = Field(default_factory=_missing)
    duration: ExtractedValue = Field(default_factory=_missing)  # years


class RentData(_CamelModel):
    annual_rent_excl_tax_excl_charges: ExtractedValue = Field(default_factory=_missing)
    quarterly_rent_excl_tax_excl_charges: ExtractedValue = Field(default_factory=_missing)
    annual_parking_rent_excl_charges: ExtractedValue = Field(default_factory=_missing)
    quarterly_parking_rent_excl_charges: ExtractedValue = Field(default_factory=_missing)
    payment_frequency: ExtractedValue = Field(default_factory=_missing)


class ChargesData(_CamelModel):
    annual_charges_provision_excl_tax: ExtractedValue = Field(default_factory=_missing)
    quarterly_charges_provision_excl_tax: ExtractedValue = Field(default_factory=_missing)


class TaxesData(_CamelModel):
    property_tax_amount: ExtractedValue = Field(default_factory=_missing)
    office_tax_amount: ExtractedValue = Field(default_factory=_missing)


class SupportMeasuresData(_CamelModel):
    rent_free_period_months: ExtractedValue = Field(default_factory=_missing)


class IndexationData(_CamelModel):
    indexation_type: ExtractedValue = Field(default_factory=_missing)  # ILAT, ILC, ICC


class SecuritiesData(_CamelModel):
    security_deposit_amount: ExtractedValue = Field(default_factory=_missing)


class LeaseExtraction(_CamelModel):
    """Rent-relevant sections of a lease extraction record."""
    calendar: CalendarData = Field(default_factory=CalendarData)
    rent: RentData = Field(default_factory=RentData)
    charges: ChargesData = Field(default_factory=ChargesData)
    taxes: TaxesData = Field(default_factory=TaxesData)
    support_measures: SupportMeasuresData = Field(default_factory=SupportMeasuresData)
    indexation: IndexationData = Field(default_factory=IndexationData)
    securities: SecuritiesData = Field(default_factory=SecuritiesData)


# ---- Index series ----


class InseeRentalIndexPoint(_CamelModel):
    """One published quarterly value of an INSEE rent reference index."""
    year: int = Field(ge=1900, le=2200)
    quarter: int = Field(ge=1, le=4)
    value: float = Field(gt=0.0)


class IndexSeriesResponse(_CamelModel):
    index_type: str
    requested_index_type: str
    points: List[InseeRentalIndexPoint] = Field(default_factory=list)


# ---- API request/response bodies ----


class ComputeScheduleRequest(BaseModel):
    """Request body for POST /api/v1/rent/compute-schedule."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    extraction_id: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("extraction_id", "extractionId")
    )


class ComputeScheduleResponse(_CamelModel):
    schedule: ComputeLeaseRentScheduleResult


class RentCalculationOutcome(_CamelModel):
    """Result of running the calculator for an extraction; extraction data is never dropped."""
    extracted_data: LeaseExtraction
    schedule_input: Optional[ScheduleInput] = None
    rent_schedule: Optional[ComputeLeaseRentScheduleResult] = None
    schedule_success: bool = False
    error_message: Optional[str] = None
    reason: Optional[str] = None


class JobOut(_CamelModel):
    id: str
    type: str
    status: str
    extraction_id: Optional[str] = None
    error: Optional[str] = None
