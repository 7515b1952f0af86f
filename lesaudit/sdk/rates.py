"""Rate lookup adapters.

The expected pay calculator never reads reference data directly. It calls
a RateTables adapter whose lookups return a value or None ("not found").
Absence is never an exception; an adapter may still raise for a broken
table, and the calculator treats that as a failure of the categories that
read it.

Two adapters are provided:

- InMemoryRateTables: rows passed in directly (tests, embedding)
- YamlRateTables: one YAML file per table under a rates directory

Rates directory layout:

    rates/
      bah.yaml              # list of HousingRate rows
      cola.yaml             # list of ColaRate rows
      base_pay.yaml         # list of BasePayRate rows
      sgli.yaml             # list of InsurancePremium rows (coverage_cents)
      dental.yaml           # list of InsurancePremium rows (plan)
      state_tax.yaml        # list of StateTaxRule rows
      tax-parameters/
        2025.yaml           # TaxParameters mapping
"""

import logging
from abc import ABC, abstractmethod
from datetime import date
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Protocol, Sequence, TypeVar, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .schemas import normalize_paygrade
from .taxes.schemas import StateTaxRule, TaxParameters
from .taxes.withholding import BUILTIN_TAX_PARAMETERS

logger = logging.getLogger(__name__)


# =============================================================================
# Row models
# =============================================================================


class _LocationRate(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    paygrade: str
    location_key: str = Field(..., description="MHA code or ZIP code")
    has_dependents: bool
    effective_date: date
    monthly_cents: int = Field(..., ge=0)

    @field_validator("paygrade")
    @classmethod
    def canonical_paygrade(cls, v: str) -> str:
        return normalize_paygrade(v)

    @field_validator("location_key")
    @classmethod
    def upper_location(cls, v: str) -> str:
        return v.strip().upper()


class HousingRate(_LocationRate):
    """BAH rate for a grade, location and dependency status."""


class ColaRate(_LocationRate):
    """COLA rate for a grade, location and dependency status."""


class BasePayRate(BaseModel):
    """Base pay table cell: applies from min_years_of_service upward."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    paygrade: str
    min_years_of_service: int = Field(..., ge=0)
    monthly_cents: int = Field(..., ge=0)

    @field_validator("paygrade")
    @classmethod
    def canonical_paygrade(cls, v: str) -> str:
        return normalize_paygrade(v)


class InsurancePremium(BaseModel):
    """Monthly premium keyed by coverage amount (SGLI) or plan tier (dental)."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    coverage_cents: Optional[int] = Field(default=None, ge=0)
    plan: Optional[str] = None
    monthly_cents: int = Field(..., ge=0)


# =============================================================================
# Selection helpers
# =============================================================================

_Dated = TypeVar("_Dated", HousingRate, ColaRate)


def select_effective(rows: Iterable[_Dated], cutoff: date) -> Optional[_Dated]:
    """Most recent row effective on or before cutoff, or None."""
    best = None
    for row in rows:
        if row.effective_date > cutoff:
            continue
        if best is None or row.effective_date > best.effective_date:
            best = row
    return best


def select_step(rows: Iterable[BasePayRate], years_of_service: int) -> Optional[BasePayRate]:
    """Highest years-of-service tier not above the member's YOS, or None."""
    best = None
    for row in rows:
        if row.min_years_of_service > years_of_service:
            continue
        if best is None or row.min_years_of_service > best.min_years_of_service:
            best = row
    return best


# =============================================================================
# Adapter contract
# =============================================================================


class RateTables(Protocol):
    """Lookups consumed by the expected pay calculator."""

    def housing_rate(
        self, paygrade: str, location_key: str, has_dependents: bool, cutoff: date
    ) -> Optional[int]: ...

    def cola_rate(
        self, location_key: str, paygrade: str, has_dependents: bool, cutoff: date
    ) -> Optional[int]: ...

    def base_pay(self, paygrade: str, years_of_service: int) -> Optional[int]: ...

    def sgli_premium(self, coverage_cents: int) -> Optional[int]: ...

    def dental_premium(self, plan: str) -> Optional[int]: ...

    def tax_parameters(self, year: int) -> Optional[TaxParameters]: ...

    def state_tax_rule(self, state: str, year: int) -> Optional[StateTaxRule]: ...


class _TableLookups(ABC):
    """Lookup logic shared by the adapters; subclasses supply the rows."""

    @abstractmethod
    def _housing_rows(self) -> Sequence[HousingRate]:
        raise NotImplementedError

    @abstractmethod
    def _cola_rows(self) -> Sequence[ColaRate]:
        raise NotImplementedError

    @abstractmethod
    def _base_pay_rows(self) -> Sequence[BasePayRate]:
        raise NotImplementedError

    @abstractmethod
    def _sgli_rows(self) -> Sequence[InsurancePremium]:
        raise NotImplementedError

    @abstractmethod
    def _dental_rows(self) -> Sequence[InsurancePremium]:
        raise NotImplementedError

    @abstractmethod
    def _state_tax_rows(self) -> Sequence[StateTaxRule]:
        raise NotImplementedError

    def housing_rate(self, paygrade, location_key, has_dependents, cutoff):
        return self._location_rate(self._housing_rows(), paygrade, location_key, has_dependents, cutoff)

    def cola_rate(self, location_key, paygrade, has_dependents, cutoff):
        return self._location_rate(self._cola_rows(), paygrade, location_key, has_dependents, cutoff)

    @staticmethod
    def _location_rate(rows, paygrade, location_key, has_dependents, cutoff):
        grade = normalize_paygrade(paygrade)
        key = location_key.strip().upper()
        matching = [
            r for r in rows
            if r.paygrade == grade and r.location_key == key and r.has_dependents == has_dependents
        ]
        row = select_effective(matching, cutoff)
        return row.monthly_cents if row else None

    def base_pay(self, paygrade, years_of_service):
        grade = normalize_paygrade(paygrade)
        row = select_step((r for r in self._base_pay_rows() if r.paygrade == grade), years_of_service)
        return row.monthly_cents if row else None

    def sgli_premium(self, coverage_cents):
        for row in self._sgli_rows():
            if row.coverage_cents == coverage_cents:
                return row.monthly_cents
        return None

    def dental_premium(self, plan):
        for row in self._dental_rows():
            if row.plan == plan:
                return row.monthly_cents
        return None

    def state_tax_rule(self, state, year):
        state = state.upper()
        for rule in self._state_tax_rows():
            if rule.state == state and rule.year == year:
                return rule
        return None


class InMemoryRateTables(_TableLookups):
    """Rate tables held in memory.

    Tax parameters default to the built-in years; pass tax_parameters={}
    to model a deployment with no tax data.
    """

    def __init__(
        self,
        housing: Iterable[HousingRate] = (),
        cola: Iterable[ColaRate] = (),
        base_pay: Iterable[BasePayRate] = (),
        sgli: Iterable[InsurancePremium] = (),
        dental: Iterable[InsurancePremium] = (),
        state_tax: Iterable[StateTaxRule] = (),
        tax_parameters: Optional[Dict[int, TaxParameters]] = None,
    ):
        self.housing = list(housing)
        self.cola = list(cola)
        self.base_pay_rows = list(base_pay)
        self.sgli = list(sgli)
        self.dental = list(dental)
        self.state_tax = list(state_tax)
        self.tax_params = dict(BUILTIN_TAX_PARAMETERS if tax_parameters is None else tax_parameters)

    def _housing_rows(self):
        return self.housing

    def _cola_rows(self):
        return self.cola

    def _base_pay_rows(self):
        return self.base_pay_rows

    def _sgli_rows(self):
        return self.sgli

    def _dental_rows(self):
        return self.dental

    def _state_tax_rows(self):
        return self.state_tax

    def tax_parameters(self, year: int) -> Optional[TaxParameters]:
        return self.tax_params.get(year)


class RateTableError(ValueError):
    """Raised when a rate table file exists but cannot be parsed."""
    pass


class YamlRateTables(_TableLookups):
    """Rate tables read from YAML files under a directory.

    Each file is loaded on first use and cached. A missing file is an empty
    table, so every lookup against it is "not found". A malformed file
    raises RateTableError from the lookups that read it and leaves the
    other tables usable.
    """

    TAX_PARAMETERS_DIR = "tax-parameters"

    def __init__(self, rates_dir: Union[str, Path]):
        self.rates_dir = Path(rates_dir)
        self._cache: Dict[str, List[Any]] = {}
        self._tax_cache: Dict[int, Optional[TaxParameters]] = {}

    def _load_rows(self, filename: str, model: type) -> List[Any]:
        if filename in self._cache:
            return self._cache[filename]

        path = self.rates_dir / filename
        if not path.exists():
            logger.debug(f"rate table {path} not found, treating as empty")
            self._cache[filename] = []
            return []

        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise RateTableError(f"Cannot parse {path}: {e}") from e

        if data is None:
            data = []
        if isinstance(data, dict) and "rates" in data:
            data = data["rates"]
        if not isinstance(data, list):
            raise RateTableError(f"{path} must contain a list of rows")

        try:
            rows = [model.model_validate(row) for row in data]
        except ValueError as e:
            raise RateTableError(f"Invalid row in {path}: {e}") from e

        logger.debug(f"loaded {len(rows)} rows from {path}")
        self._cache[filename] = rows
        return rows

    def _housing_rows(self):
        return self._load_rows("bah.yaml", HousingRate)

    def _cola_rows(self):
        return self._load_rows("cola.yaml", ColaRate)

    def _base_pay_rows(self):
        return self._load_rows("base_pay.yaml", BasePayRate)

    def _sgli_rows(self):
        return self._load_rows("sgli.yaml", InsurancePremium)

    def _dental_rows(self):
        return self._load_rows("dental.yaml", InsurancePremium)

    def _state_tax_rows(self):
        return self._load_rows("state_tax.yaml", StateTaxRule)

    def tax_parameters(self, year: int) -> Optional[TaxParameters]:
        """Parameters from tax-parameters/<year>.yaml, else the built-in year."""
        if year in self._tax_cache:
            return self._tax_cache[year]

        path = self.rates_dir / self.TAX_PARAMETERS_DIR / f"{year}.yaml"
        if path.exists():
            try:
                with open(path, "r") as f:
                    data = yaml.safe_load(f) or {}
                data.setdefault("year", year)
                params = TaxParameters.model_validate(data)
            except (yaml.YAMLError, ValueError, AttributeError) as e:
                raise RateTableError(f"Invalid tax parameters in {path}: {e}") from e
        else:
            params = BUILTIN_TAX_PARAMETERS.get(year)
            if params is None:
                logger.debug(f"no tax parameters for {year}")

        self._tax_cache[year] = params
        return params
