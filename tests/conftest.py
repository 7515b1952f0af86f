"""Shared fixtures: a small E05 rate table set and a matching profile.

Reference month is June 2025 for an E05 with 6 YOS and dependents at WA408:

    base pay 3,800.00   BAH 2,700.00   BAS 460.25   COLA none
    taxable gross 3,800.00   total pay 6,960.25
    TSP 5% 348.01   SGLI 26.00
    FICA 235.60   Medicare 55.10   federal 290.17   state (TX) 0.00
    net pay 6,005.37
"""

from datetime import date

import pytest
import yaml

from lesaudit.sdk.rates import (
    BasePayRate,
    HousingRate,
    InMemoryRateTables,
    InsurancePremium,
)
from lesaudit.sdk.schemas import MemberProfile
from lesaudit.sdk.taxes import StateTaxRule


BASE_PAY_ROWS = [
    {"paygrade": "E05", "min_years_of_service": 0, "monthly_cents": 300000},
    {"paygrade": "E05", "min_years_of_service": 4, "monthly_cents": 350000},
    {"paygrade": "E05", "min_years_of_service": 6, "monthly_cents": 380000},
    {"paygrade": "E05", "min_years_of_service": 8, "monthly_cents": 400000},
]

BAH_ROWS = [
    {"paygrade": "E05", "location_key": "WA408", "has_dependents": True,
     "effective_date": date(2024, 1, 1), "monthly_cents": 250000},
    {"paygrade": "E05", "location_key": "WA408", "has_dependents": True,
     "effective_date": date(2025, 1, 1), "monthly_cents": 270000},
    {"paygrade": "E05", "location_key": "WA408", "has_dependents": True,
     "effective_date": date(2025, 7, 1), "monthly_cents": 280000},
    {"paygrade": "E05", "location_key": "WA408", "has_dependents": False,
     "effective_date": date(2025, 1, 1), "monthly_cents": 210000},
]

SGLI_ROWS = [
    {"coverage_cents": 50000000, "monthly_cents": 2600},
]

DENTAL_ROWS = [
    {"plan": "single", "monthly_cents": 1449},
]

STATE_TAX_ROWS = [
    {"state": "CA", "year": 2025, "rate_percent": 5.0, "has_brackets": True},
    {"state": "PA", "year": 2025, "rate_percent": 3.07},
]

EXPECTED_JUNE_2025 = {
    "base_pay_cents": 380000,
    "bah_cents": 270000,
    "bas_cents": 46025,
    "taxable_gross_cents": 380000,
    "total_pay_cents": 696025,
    "tsp_cents": 34801,
    "sgli_cents": 2600,
    "fica_cents": 23560,
    "medicare_cents": 5510,
    "federal_tax_cents": 29017,
    "state_tax_cents": 0,
    "net_pay_cents": 600537,
}


def write_yaml(path, data):
    """Write data as YAML, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False)
    return path


@pytest.fixture
def rates():
    """In-memory rate tables with the built-in 2025 tax parameters."""
    return InMemoryRateTables(
        housing=[HousingRate(**row) for row in BAH_ROWS],
        base_pay=[BasePayRate(**row) for row in BASE_PAY_ROWS],
        sgli=[InsurancePremium(**row) for row in SGLI_ROWS],
        dental=[InsurancePremium(**row) for row in DENTAL_ROWS],
        state_tax=[StateTaxRule(**row) for row in STATE_TAX_ROWS],
    )


@pytest.fixture
def rates_dir(tmp_path):
    """The same rate tables written as YAML files."""
    root = tmp_path / "rates"
    write_yaml(root / "base_pay.yaml", BASE_PAY_ROWS)
    write_yaml(root / "bah.yaml", BAH_ROWS)
    write_yaml(root / "sgli.yaml", SGLI_ROWS)
    write_yaml(root / "dental.yaml", DENTAL_ROWS)
    write_yaml(root / "state_tax.yaml", STATE_TAX_ROWS)
    return root


@pytest.fixture
def profile_data():
    return {
        "paygrade": "E-5",
        "years_of_service": 6,
        "location_key": "wa408",
        "has_dependents": True,
        "filing_status": "single",
        "state_of_residence": "TX",
        "tsp_contribution_rate": 0.05,
        "sgli_coverage_cents": 50000000,
    }


@pytest.fixture
def profile(profile_data):
    return MemberProfile(**profile_data)


@pytest.fixture
def isolated_env(tmp_path, monkeypatch):
    """Isolated config and data directories."""
    config_dir = tmp_path / "config"
    data_dir = tmp_path / "data"

    config_dir.mkdir()
    data_dir.mkdir()

    # Point SDK to isolated directories
    monkeypatch.setenv("LES_AUDIT_CONFIG_PATH", str(config_dir))
    monkeypatch.setenv("XDG_DATA_HOME", str(data_dir))

    return {
        "config_dir": config_dir,
        "data_dir": data_dir,
        "settings_file": config_dir / "settings.json",
    }


@pytest.fixture
def expected_june():
    """Expected snapshot values for the fixture profile in June 2025."""
    return dict(EXPECTED_JUNE_2025)


@pytest.fixture
def yaml_file():
    """Writer for YAML fixture files."""
    return write_yaml
