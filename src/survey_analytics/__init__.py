"""
Survey Analytics.

Anonymous community health surveys and their aggregate views:
- Mental-wellness and phobia-intensity questionnaires with 0-100 scoring
- Append-only record store with in-memory and PostgREST backends
- Windowed dashboard statistics with regional breakdowns
- Admin summary and raw CSV/JSON export behind an explicit capability
"""

from .exceptions import (
    AuthorizationError,
    EmptyExportError,
    ErrorCategory,
    StoreError,
    StoreTimeoutError,
    SurveyError,
    ValidationError,
)
from .schemas import (
    MENTAL_HEALTH_TABLE,
    AgeGroup,
    MentalHealthRecord,
    PhobiaRecord,
    PhobiaType,
    RiskLevel,
    SeverityCategory,
    SurveyRecord,
    SurveyType,
)
from .security import AdminCapability, IdentityProvider, JWTIdentityProvider

__version__ = "1.0.0"

__all__ = [
    "AdminCapability",
    "AgeGroup",
    "AuthorizationError",
    "EmptyExportError",
    "ErrorCategory",
    "IdentityProvider",
    "MENTAL_HEALTH_TABLE",
    "MentalHealthRecord",
    "PhobiaRecord",
    "PhobiaType",
    "RiskLevel",
    "SeverityCategory",
    "JWTIdentityProvider",
    "StoreError",
    "StoreTimeoutError",
    "SurveyError",
    "SurveyRecord",
    "SurveyType",
    "ValidationError",
]
