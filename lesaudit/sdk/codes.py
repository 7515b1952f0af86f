"""LES line code catalog.

Canonical mapping of LES line codes to sections and the raw labels that
different statement formats use for them. The parser upstream of the engine
emits whatever text is printed on the statement; normalize_line_items turns
those rows into LineItems with canonical codes so that comparison keys match.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

import yaml

from .schemas import LineItem, SECTIONS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LesCode:
    """Metadata for one canonical code."""

    section: Optional[str]
    description: str
    aliases: Tuple[str, ...] = field(default_factory=tuple)
    special_pay: bool = False


LES_CODES: Dict[str, LesCode] = {
    # Allowances
    "BASE_PAY": LesCode(
        "ALLOWANCE", "Base Pay",
        ("BASE PAY", "BASIC PAY", "BASE COMPENSATION", "MONTHLY BASE PAY", "BASEPAY"),
    ),
    "BAH": LesCode(
        "ALLOWANCE", "Basic Allowance for Housing",
        ("BASIC ALLOW HOUS", "BASIC ALLOWANCE FOR HOUSING", "BAH W/DEP", "BAH W/O DEP",
         "BAH WITHOUT DEPENDENTS", "BAH WITH DEPENDENTS", "BASIC ALLOW FOR HOUSING"),
    ),
    "BAS": LesCode(
        "ALLOWANCE", "Basic Allowance for Subsistence",
        ("BASIC ALLOW SUBSISTENCE", "BASIC ALLOWANCE FOR SUBSISTENCE",
         "BASIC ALLOW FOR SUBSISTENCE"),
    ),
    "COLA": LesCode(
        "ALLOWANCE", "Cost of Living Allowance",
        ("COST OF LIVING", "COST OF LIVING ALLOWANCE", "COST LIVING ALLOW", "COL ALLOWANCE"),
    ),
    "SDAP": LesCode(
        "ALLOWANCE", "Special Duty Assignment Pay",
        ("SPECIAL DUTY ASSIGNMENT PAY", "SPECIAL DUTY ASSGN PAY", "SPEC DUTY PAY"),
        special_pay=True,
    ),
    "HFP_IDP": LesCode(
        "ALLOWANCE", "Hostile Fire Pay / Imminent Danger Pay",
        ("HOSTILE FIRE/IMMINENT DANGER PAY", "HOSTILE FIRE PAY", "IMMINENT DANGER PAY",
         "HFP/IDP", "IDP/HFP", "HFP", "IDP"),
        special_pay=True,
    ),
    "FSA": LesCode(
        "ALLOWANCE", "Family Separation Allowance",
        ("FAMILY SEPARATION ALLOWANCE", "FAMILY SEP ALLOW", "FAM SEP ALLOWANCE"),
        special_pay=True,
    ),
    "FLPP": LesCode(
        "ALLOWANCE", "Foreign Language Proficiency Pay",
        ("FOREIGN LANGUAGE PROFICIENCY PAY", "FOREIGN LANG PROF PAY", "FOREIGN LANGUAGE PAY"),
        special_pay=True,
    ),
    # Deductions
    "SGLI": LesCode(
        "DEDUCTION", "Servicemembers Group Life Insurance",
        ("SERVICEMEMBERS GROUP LIFE INSURANCE", "SGLI PREMIUM", "SGLI INS"),
    ),
    "TSP": LesCode(
        "DEDUCTION", "Thrift Savings Plan Contribution",
        ("THRIFT SAVINGS PLAN", "TSP CONTRIBUTION", "TSP CONTR"),
    ),
    "DENTAL": LesCode(
        "DEDUCTION", "Dental Insurance Premium",
        ("TRICARE DENTAL", "DENTAL INSURANCE", "DENTAL PREM"),
    ),
    "SBP": LesCode(
        "DEDUCTION", "Survivor Benefit Plan",
        ("SURVIVOR BENEFIT PLAN", "SBP PREMIUM", "SBP COST"),
    ),
    # Taxes
    "FITW": LesCode(
        "TAX", "Federal Income Tax Withheld",
        ("FEDERAL INCOME TAX WITHHELD", "FED TAX WITHHELD", "FEDERAL TAX", "FED INC TAX",
         "TAX_FED"),
    ),
    "FICA": LesCode(
        "TAX", "Social Security (OASDI)",
        ("FICA TAX", "SOCIAL SECURITY", "SOC SEC TAX", "OASDI"),
    ),
    "MEDICARE": LesCode(
        "TAX", "Medicare Tax",
        ("MEDICARE TAX", "MED TAX"),
    ),
    "SITW": LesCode(
        "TAX", "State Income Tax Withheld",
        ("STATE INCOME TAX WITHHELD", "STATE TAX", "ST INC TAX", "TAX_STATE"),
    ),
    # Allotments
    "ALLOT": LesCode(
        "ALLOTMENT", "Voluntary Allotment",
        ("DISCRETIONARY ALLOTMENT", "VOLUNTARY ALLOTMENT", "ALLOTMENT"),
    ),
    # Summary
    "NET_PAY": LesCode(
        None, "Net Pay",
        ("NET PAY", "NET AMOUNT", "TAKE HOME PAY", "EOM PAY"),
    ),
}


def canonicalize_code(raw: str) -> Optional[str]:
    """Map a raw statement label to its canonical code.

    Checks exact code match, then exact alias match, then substring alias
    match (longest alias first, so "HOSTILE FIRE PAY" wins over "HFP").

    Returns:
        Canonical code (e.g., "BAH") or None if not recognized
    """
    normalized = " ".join(raw.strip().upper().split())
    if not normalized:
        return None

    if normalized in LES_CODES:
        return normalized

    for code, meta in LES_CODES.items():
        if normalized in meta.aliases:
            return code

    candidates = [
        (len(alias), code)
        for code, meta in LES_CODES.items()
        for alias in meta.aliases
        if alias in normalized
    ]
    if candidates:
        return max(candidates)[1]

    return None


def get_section(code: str) -> Optional[str]:
    """Section for a canonical code, or None if unknown or sectionless."""
    meta = LES_CODES.get(code.upper())
    return meta.section if meta else None


def get_description(code: str) -> str:
    meta = LES_CODES.get(code.upper())
    return meta.description if meta else code


def is_special_pay(code: str) -> bool:
    meta = LES_CODES.get(code.upper())
    return bool(meta and meta.special_pay)


def special_pay_codes() -> List[str]:
    return [code for code, meta in LES_CODES.items() if meta.special_pay]


def normalize_line_items(rows: Iterable[Dict[str, Any]]) -> List[LineItem]:
    """Turn raw parsed rows into LineItems with canonical codes.

    Each row needs a code (or description) and amount_cents. The section is
    taken from the row when present, else from the catalog. Unrecognized
    codes are kept upper-cased so they still count toward section totals.

    Raises:
        ValueError: If a row has no section and its code is not in the catalog
    """
    items = []
    for row in rows:
        raw_code = row.get("code") or row.get("description") or ""
        canonical = canonicalize_code(raw_code)
        code = canonical or " ".join(raw_code.strip().upper().split())
        if canonical is None:
            logger.debug(f"unrecognized line code '{raw_code}', keeping as '{code}'")

        section = (row.get("section") or "").strip().upper() or get_section(code)
        if section is None and code == "NET_PAY":
            section = "ADJUSTMENT"
        if section not in SECTIONS:
            raise ValueError(f"Line '{raw_code}' has no recognizable section")

        items.append(LineItem(
            section=section,
            code=code,
            amount_cents=int(row.get("amount_cents", 0)),
            ytd_cents=int(row.get("ytd_cents", 0)),
            description=row.get("description"),
        ))
    return items


def load_statement(path) -> Dict[str, Any]:
    """Load a parsed LES from YAML.

    The file is either a list of rows or a mapping with 'line_items' and
    optional 'month' / 'year'.

    Returns:
        {"month": int|None, "year": int|None, "line_items": List[LineItem]}

    Raises:
        ValueError: If the file is not YAML, its shape is not recognized or a row is invalid
    """
    with open(path, "r") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Cannot parse {path}: {e}") from e

    if data is None:
        data = []
    if isinstance(data, list):
        data = {"line_items": data}
    if not isinstance(data, dict) or not isinstance(data.get("line_items", []), list):
        raise ValueError(f"{path}: expected a list of line items or a mapping with 'line_items'")

    unknown = set(data) - {"month", "year", "line_items"}
    if unknown:
        raise ValueError(f"{path}: unknown keys {sorted(unknown)}")

    return {
        "month": data.get("month"),
        "year": data.get("year"),
        "line_items": normalize_line_items(data.get("line_items") or []),
    }
