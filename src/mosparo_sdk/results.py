"""
Result types returned by the mosparo client
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class FieldStatus(str, Enum):
    """Verification status of a single form field"""
    VALID = "valid"
    INVALID = "invalid"
    NOT_VERIFIED = "not-verified"


@dataclass(frozen=True)
class VerificationResult:
    """
    Verification result from the mosparo API.

    Attributes:
        submittable: True if mosparo reported the submission as valid and
            the echoed verification signature matched the local one
        valid: The raw verdict returned by mosparo
        verified_fields: Verification status per field key
        issues: Issues reported by mosparo, each with a ``message``
        debug_information: Optional diagnostic data sent by mosparo
    """
    submittable: bool
    valid: bool
    verified_fields: Dict[str, str] = field(default_factory=dict)
    issues: List[Dict[str, Any]] = field(default_factory=list)
    debug_information: Optional[Dict[str, Any]] = None

    FIELD_VALID = FieldStatus.VALID
    FIELD_INVALID = FieldStatus.INVALID
    FIELD_NOT_VERIFIED = FieldStatus.NOT_VERIFIED

    def is_submittable(self) -> bool:
        return self.submittable

    def is_valid(self) -> bool:
        return self.valid

    def get_verified_fields(self) -> Dict[str, str]:
        return dict(self.verified_fields)

    def get_verified_field(self, key: str) -> str:
        """
        Return the verification status for the given field key.

        Unknown keys are reported as ``FieldStatus.NOT_VERIFIED``.
        """
        return self.verified_fields.get(key, FieldStatus.NOT_VERIFIED)

    def has_issues(self) -> bool:
        return bool(self.issues)

    def get_issues(self) -> List[Dict[str, Any]]:
        return list(self.issues)

    def get_debug_information(self) -> Optional[Dict[str, Any]]:
        return self.debug_information

    def to_dict(self) -> Dict[str, Any]:
        return {
            'submittable': self.submittable,
            'valid': self.valid,
            'verified_fields': dict(self.verified_fields),
            'issues': list(self.issues),
            'debug_information': self.debug_information,
        }


@dataclass(frozen=True)
class StatisticResult:
    """Submission statistics of a project."""
    number_of_valid_submissions: int
    number_of_spam_submissions: int
    numbers_by_date: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'number_of_valid_submissions': self.number_of_valid_submissions,
            'number_of_spam_submissions': self.number_of_spam_submissions,
            'numbers_by_date': dict(self.numbers_by_date),
        }


@dataclass(frozen=True)
class RulePackageImportResult:
    """Result of a rule package import."""
    successful: bool
    hash_validated: bool

    def is_successful(self) -> bool:
        return self.successful

    def is_hash_validated(self) -> bool:
        return self.hash_validated

    def to_dict(self) -> Dict[str, Any]:
        return {
            'successful': self.successful,
            'hash_validated': self.hash_validated,
        }
