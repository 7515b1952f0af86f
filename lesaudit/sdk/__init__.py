"""LES Audit SDK - Expected pay modeling and LES reconciliation."""

from .config import (
    get_config_dir,
    get_settings_path,
    load_settings,
    save_settings,
    get_setting,
    set_setting,
    get_profile_path,
    load_profile,
    save_profile,
    get_rates_path,
    load_thresholds,
    ConfigNotFoundError,
    ProfileNotFoundError,
    ProfileInvalidError,
)

from .errors import (
    LesAuditError,
    InvalidPeriodError,
    ImplausibleProfileError,
)

from .schemas import (
    LineItem,
    SpecialPayElection,
    MemberProfile,
    ExpectedSpecialPay,
    ExpectedSnapshot,
    PayFlag,
    Totals,
    ComparisonResult,
    ComparisonThresholds,
    normalize_paygrade,
)

from .paygrade import (
    RankCheck,
    validate_rank_yos,
    is_officer,
    is_enlisted,
)

from .codes import (
    LES_CODES,
    canonicalize_code,
    get_section,
    get_description,
    is_special_pay,
    load_statement,
    normalize_line_items,
)

from .rates import (
    RateTables,
    HousingRate,
    ColaRate,
    BasePayRate,
    InsurancePremium,
    InMemoryRateTables,
    YamlRateTables,
    RateTableError,
)

from .modeling import (
    Lookup,
    ReconciliationReport,
    StatementBalance,
    balance_statement,
    build_expected_snapshot,
    compare_to_expected,
    reconcile,
)

__all__ = [
    # Config
    "get_config_dir",
    "get_settings_path",
    "load_settings",
    "save_settings",
    "get_setting",
    "set_setting",
    "get_profile_path",
    "load_profile",
    "save_profile",
    "get_rates_path",
    "load_thresholds",
    "ConfigNotFoundError",
    "ProfileNotFoundError",
    "ProfileInvalidError",
    # Errors
    "LesAuditError",
    "InvalidPeriodError",
    "ImplausibleProfileError",
    # Schemas
    "LineItem",
    "SpecialPayElection",
    "MemberProfile",
    "ExpectedSpecialPay",
    "ExpectedSnapshot",
    "PayFlag",
    "Totals",
    "ComparisonResult",
    "ComparisonThresholds",
    "normalize_paygrade",
    # Rank check
    "RankCheck",
    "validate_rank_yos",
    "is_officer",
    "is_enlisted",
    # Codes
    "LES_CODES",
    "canonicalize_code",
    "get_section",
    "get_description",
    "is_special_pay",
    "load_statement",
    "normalize_line_items",
    # Rate tables
    "RateTables",
    "HousingRate",
    "ColaRate",
    "BasePayRate",
    "InsurancePremium",
    "InMemoryRateTables",
    "YamlRateTables",
    "RateTableError",
    # Modeling
    "Lookup",
    "ReconciliationReport",
    "StatementBalance",
    "balance_statement",
    "build_expected_snapshot",
    "compare_to_expected",
    "reconcile",
]
