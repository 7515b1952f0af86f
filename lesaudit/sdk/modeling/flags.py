"""Flag wording for the comparison engine.

Messages lead with the finding and the dollar amounts; suggestions give a
concrete next step. Each category carries a reference URL for the official
rate source.
"""

from dataclasses import dataclass
from typing import Dict, Optional

from ..codes import get_description
from ..schemas import ExpectedSnapshot, PayFlag, Severity


DFAS_PAY_TABLES = "https://www.dfas.mil/MilitaryMembers/payentitlements/Pay-Tables/"
BAH_CALCULATOR = "https://www.defensetravel.dod.mil/site/bahCalc.cfm"
BAS_RATES = "https://www.dfas.mil/MilitaryMembers/payentitlements/Pay-Tables/BAS/"
COLA_RATES = "https://www.travel.dod.mil/Travel-Transportation-Rates/Per-Diem/COLA-Rates/"
TSP_SITE = "https://www.tsp.gov/"
SGLI_INFO = "https://www.benefits.va.gov/insurance/sgli.asp"
IRS_WITHHOLDING = "https://www.irs.gov/individuals/tax-withholding-estimator"


@dataclass(frozen=True)
class FlagText:
    label: str
    ref_url: Optional[str]
    missing: str
    mismatch: str
    unexpected: str


FLAG_TEXT: Dict[str, FlagText] = {
    "BASE_PAY": FlagText(
        "Base Pay", DFAS_PAY_TABLES,
        missing="File a pay ticket with your finance office immediately. Bring orders, ID card "
                "and this LES and request retroactive payment.",
        mismatch="Ask finance to verify the pay table applied for your grade and time in service. "
                 "A recent promotion or an incorrect pay entry base date are common causes.",
        unexpected="Base pay could not be estimated for your profile. Verify it against the "
                   "DFAS pay tables for your grade and years of service.",
    ),
    "BAH": FlagText(
        "BAH", BAH_CALCULATOR,
        missing="Contact your finance office. Verify your duty station and dependent status "
                "in DEERS/DJMS and request retroactive BAH.",
        mismatch="Contact your finance office. Verify your MHA code and dependent status are "
                 "correct and request a retroactive correction if applicable.",
        unexpected="No BAH rate is on file for your profile. Confirm the rate with the BAH "
                   "calculator for your MHA and dependent status.",
    ),
    "BAS": FlagText(
        "BAS", BAS_RATES,
        missing="File a pay ticket with finance. BAS is a mandatory entitlement. "
                "Request retroactive payment from the start of entitlement.",
        mismatch="Verify with finance that the correct BAS rate is applied. "
                 "A rate change or partial month entitlement can cause this.",
        unexpected="BAS could not be estimated for your pay grade. Verify it against the "
                   "published BAS rates.",
    ),
    "COLA": FlagText(
        "COLA", COLA_RATES,
        missing="Verify your duty station still qualifies for COLA. After a PCS, make sure "
                "DJMS shows the new duty station.",
        mismatch="Verify the duty station code in DJMS. COLA rates change periodically, "
                 "so check for a recent rate update.",
        unexpected="Verify your duty station code. If your location does not qualify for COLA, "
                   "notify finance to avoid a future debt.",
    ),
    "TSP": FlagText(
        "TSP contribution", TSP_SITE,
        missing="Check your TSP election in myPay. New elections can take one or two pay "
                "periods to start.",
        mismatch="Verify your TSP percentage in myPay matches your profile. Remember TSP is "
                 "taken from total pay, including BAH and BAS.",
        unexpected="Your profile has no TSP election. Update your profile or review the "
                   "election in myPay.",
    ),
    "SGLI": FlagText(
        "SGLI premium", SGLI_INFO,
        missing="Verify your SGLI coverage in SOES. If you are covered but not charged, "
                "notify finance to avoid a lapse or a later debt.",
        mismatch="Verify your SGLI coverage amount. Premiums change the pay period after a "
                 "coverage change. Contact finance if you are being overcharged.",
        unexpected="Your profile shows no SGLI coverage. Verify your election in SOES.",
    ),
    "DENTAL": FlagText(
        "Dental premium", None,
        missing="Verify your TRICARE Dental enrollment. Premiums are usually collected "
                "by allotment from pay.",
        mismatch="Dental premiums vary by plan and family size. Verify your plan tier; "
                 "the expected amount is an estimate.",
        unexpected="Your profile shows no dental plan. Verify your TRICARE Dental enrollment.",
    ),
    "FICA": FlagText(
        "Social Security (FICA)", None,
        missing="FICA should be withheld on taxable pay. Contact finance unless you have "
                "reached the annual wage base.",
        mismatch="FICA is 6.2% of taxable gross (base pay, COLA and special pays; BAH and BAS "
                 "are not taxed). Contact finance if the math does not match.",
        unexpected="FICA could not be estimated. Verify it is 6.2% of your taxable gross.",
    ),
    "MEDICARE": FlagText(
        "Medicare", None,
        missing="Medicare should be withheld on all taxable pay. Contact finance.",
        mismatch="Medicare is 1.45% of taxable gross with no wage base. "
                 "Contact finance if the math does not match.",
        unexpected="Medicare could not be estimated. Verify it is 1.45% of your taxable gross.",
    ),
    "FITW": FlagText(
        "Federal income tax", IRS_WITHHOLDING,
        missing="No federal tax was withheld. Verify your W-4 and any combat zone exclusion "
                "status. The expected amount is a rough estimate.",
        mismatch="This is a rough estimate only. Withholding depends on your W-4 and YTD "
                 "earnings. Use the IRS withholding estimator to check your W-4.",
        unexpected="Federal tax could not be estimated for your profile. Use the IRS "
                   "withholding estimator to check your W-4.",
    ),
    "SITW": FlagText(
        "State income tax", None,
        missing="No state tax was withheld. Verify your state of legal residence in myPay. "
                "The expected amount is an estimate.",
        mismatch="This is an estimate based on your state of legal residence. Verify your "
                 "legal residence in myPay and your state withholding certificate.",
        unexpected="State tax could not be estimated. Verify your state of legal residence "
                   "in myPay.",
    ),
}


def dollars(cents: int) -> str:
    """Format cents as $1,234.56 (magnitude only)."""
    return f"${abs(cents) / 100:,.2f}"


def signed_dollars(cents: int) -> str:
    sign = "+" if cents >= 0 else "-"
    return f"{sign}{dollars(cents)}"


def text_for(category: str) -> FlagText:
    """Wording for a category; special pays share a generic template."""
    text = FLAG_TEXT.get(category)
    if text is not None:
        return text
    label = get_description(category)
    return FlagText(
        label, DFAS_PAY_TABLES,
        missing=f"Contact finance to verify your {category} entitlement is in the system. "
                f"Bring supporting documentation and request retroactive payment.",
        mismatch=f"Verify the {category} rate with finance. Rates may vary by assignment "
                 f"or proficiency level.",
        unexpected=f"Your profile has no {category} election. Verify the entitlement or "
                   f"update your profile.",
    )


def _context(category: str, snapshot: ExpectedSnapshot) -> str:
    if category == "BASE_PAY":
        return f" for {snapshot.paygrade} with {snapshot.years_of_service} YOS"
    if category == "BAH" and snapshot.location_key:
        dep = "with" if snapshot.has_dependents else "without"
        return f" for {snapshot.paygrade} {dep} dependents at {snapshot.location_key}"
    if category == "COLA" and snapshot.location_key:
        return f" at {snapshot.location_key}"
    return ""


def missing_flag(
    category: str, severity: Severity, expected: int, delta: int, snapshot: ExpectedSnapshot
) -> PayFlag:
    text = text_for(category)
    return PayFlag(
        code=f"{category}_MISSING",
        category=category,
        severity=severity,
        message=f"{text.label} not found on LES. Expected {dollars(expected)}/month"
                f"{_context(category, snapshot)}.",
        suggestion=text.missing,
        delta_cents=delta,
        ref_url=text.ref_url,
    )


def mismatch_flag(
    category: str,
    severity: Severity,
    expected: int,
    actual: int,
    delta: int,
    snapshot: ExpectedSnapshot,
) -> PayFlag:
    text = text_for(category)
    direction = "underpaid" if delta > 0 else "overpaid"
    return PayFlag(
        code=f"{category}_MISMATCH",
        category=category,
        severity=severity,
        message=f"{text.label} mismatch: LES shows {dollars(actual)}, expected "
                f"{dollars(expected)}{_context(category, snapshot)}. "
                f"Delta {signed_dollars(delta)} ({direction}).",
        suggestion=text.mismatch,
        delta_cents=delta,
        ref_url=text.ref_url,
    )


def verified_flag(category: str, actual: int, delta: int) -> PayFlag:
    text = text_for(category)
    return PayFlag(
        code=f"{category}_VERIFIED",
        category=category,
        severity="green",
        message=f"{text.label} verified: {dollars(actual)}.",
        suggestion=f"No action needed. {text.label} matches the expected amount.",
        delta_cents=delta,
        ref_url=text.ref_url,
    )


def unexpected_flag(category: str, actual: int, reason: Optional[str]) -> PayFlag:
    text = text_for(category)
    why = f" ({reason})" if reason else ""
    return PayFlag(
        code=f"{category}_UNEXPECTED",
        category=category,
        severity="yellow",
        message=f"{text.label} of {dollars(actual)} on LES but no expected amount"
                f" could be computed{why}.",
        suggestion=text.unexpected,
        ref_url=text.ref_url,
    )


def net_pay_verification_needed_flag(
    expected: Optional[int], actual: Optional[int]
) -> PayFlag:
    if actual is None:
        message = "Net pay not found on LES, so it cannot be verified."
        suggestion = "Enter the net pay amount from your LES to confirm your paycheck."
    else:
        message = (
            f"Net pay of {dollars(actual)} could not be verified: not enough data to "
            f"compute an expected amount."
        )
        suggestion = "Review the flags above and complete your profile to verify net pay."
    return PayFlag(
        code="NET_PAY_VERIFICATION_NEEDED",
        category="NET_PAY",
        severity="yellow",
        message=message,
        suggestion=suggestion,
    )


def net_pay_verified_flag(actual: int, delta: int) -> PayFlag:
    return PayFlag(
        code="NET_PAY_VERIFIED",
        category="NET_PAY",
        severity="green",
        message=f"Net pay verified: {dollars(actual)}. Your paycheck is correct.",
        suggestion="No action needed. Entitlements, deductions and taxes add up.",
        delta_cents=delta,
    )


def net_pay_mismatch_flag(expected: int, actual: int, delta: int) -> PayFlag:
    short = delta > 0
    return PayFlag(
        code="NET_PAY_MISMATCH",
        category="NET_PAY",
        severity="red" if short else "yellow",
        message=f"Net pay discrepancy: received {dollars(actual)}, expected {dollars(expected)}. "
                f"You are {'SHORT' if short else 'OVER'} by {dollars(delta)}.",
        suggestion="Review the flags above to see where the difference comes from "
                   "(allowances, deductions or taxes) and address each with finance.",
        delta_cents=delta,
    )


def all_verified_flag() -> PayFlag:
    return PayFlag(
        code="ALL_VERIFIED",
        category="ALL",
        severity="green",
        message="All allowances verified. No discrepancies found.",
        suggestion="Your pay appears correct. Review individual line items in the detail view.",
    )
