"""
Transaction Data Quality Checks

Rule-based checks over the normalized transaction frame. Results are
reported alongside the metrics; a failing check never aborts a run.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

import polars as pl
import structlog

from arr_analytics.store.models import TransactionType

logger = structlog.get_logger(__name__)


class ValidationSeverity(str, Enum):
    """Severity levels for validation failures"""
    ERROR = "error"
    WARNING = "warning"


class ValidationStatus(str, Enum):
    """Overall validation status"""
    PASSED = "passed"
    FAILED = "failed"
    PARTIAL = "partial"


@dataclass
class ValidationCheck:
    """Single validation check result"""
    name: str
    passed: bool
    severity: ValidationSeverity
    message: str
    details: Optional[Dict[str, Any]] = None
    failed_rows: int = 0
    total_rows: int = 0


@dataclass
class ValidationResult:
    """Complete validation suite result"""
    status: ValidationStatus
    total_checks: int
    passed_checks: int
    failed_checks: int
    warning_count: int
    checks: List[ValidationCheck] = field(default_factory=list)
    completed_at: Optional[datetime] = None

    @property
    def failed_check_names(self) -> List[str]:
        return [check.name for check in self.checks if not check.passed]


class TransactionValidator:
    """
    Data quality validator for transaction frames.

    Example:
        validator = TransactionValidator()
        validator.add_not_null_check("created", severity=ValidationSeverity.WARNING)
        result = validator.validate(store.frame)
    """

    def __init__(self):
        self._checks: List[Callable[[pl.DataFrame], ValidationCheck]] = []

    @staticmethod
    def _missing_column(name: str, column: str, severity: ValidationSeverity) -> ValidationCheck:
        return ValidationCheck(
            name=name,
            passed=False,
            severity=severity,
            message=f"Column '{column}' not found",
        )

    def add_not_null_check(
        self,
        column: str,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "TransactionValidator":
        """Add check for null values in column"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            name = f"not_null_{column}"
            if column not in df.columns:
                return self._missing_column(name, column, severity)

            null_count = df[column].null_count()
            passed = null_count == 0
            return ValidationCheck(
                name=name,
                passed=passed,
                severity=severity,
                message=f"Column '{column}' has {null_count} null values" if not passed else f"Column '{column}' has no null values",
                details={"null_count": null_count},
                failed_rows=null_count,
                total_rows=len(df),
            )

        self._checks.append(check)
        return self

    def add_unique_check(
        self,
        column: str,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "TransactionValidator":
        """Add check for uniqueness of column values"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            name = f"unique_{column}"
            if column not in df.columns:
                return self._missing_column(name, column, severity)

            duplicate_count = len(df) - df[column].n_unique()
            passed = duplicate_count == 0
            return ValidationCheck(
                name=name,
                passed=passed,
                severity=severity,
                message=f"Column '{column}' has {duplicate_count} duplicate values" if not passed else f"Column '{column}' values are unique",
                details={"duplicate_count": duplicate_count},
                failed_rows=duplicate_count,
                total_rows=len(df),
            )

        self._checks.append(check)
        return self

    def add_enum_check(
        self,
        column: str,
        allowed_values: List[Any],
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "TransactionValidator":
        """Add check for values in allowed set"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            name = f"enum_{column}"
            if column not in df.columns:
                return self._missing_column(name, column, severity)

            invalid = df.filter(
                ~pl.col(column).is_in(allowed_values) & pl.col(column).is_not_null()
            ).height
            passed = invalid == 0
            return ValidationCheck(
                name=name,
                passed=passed,
                severity=severity,
                message=f"Column '{column}' has {invalid} invalid values" if not passed else "All values are valid",
                details={"allowed_values": allowed_values, "invalid_count": invalid},
                failed_rows=invalid,
                total_rows=len(df),
            )

        self._checks.append(check)
        return self

    def add_single_value_check(
        self,
        column: str,
        severity: ValidationSeverity = ValidationSeverity.WARNING,
    ) -> "TransactionValidator":
        """Add check that a column holds at most one distinct value"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            name = f"single_value_{column}"
            if column not in df.columns:
                return self._missing_column(name, column, severity)

            values = sorted(df[column].drop_nulls().unique().to_list())
            passed = len(values) <= 1
            return ValidationCheck(
                name=name,
                passed=passed,
                severity=severity,
                message=f"Column '{column}' mixes {len(values)} values: {values}" if not passed else f"Column '{column}' is consistent",
                details={"values": values},
                total_rows=len(df),
            )

        self._checks.append(check)
        return self

    def add_custom_check(
        self,
        name: str,
        check_func: Callable[[pl.DataFrame], bool],
        message_on_fail: str,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "TransactionValidator":
        """Add custom validation check"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            passed = bool(check_func(df))
            return ValidationCheck(
                name=name,
                passed=passed,
                severity=severity,
                message="Check passed" if passed else message_on_fail,
                total_rows=len(df),
            )

        self._checks.append(check)
        return self

    def validate(self, df: pl.DataFrame) -> ValidationResult:
        """
        Run all validation checks on the frame.

        Args:
            df: Transaction frame to validate

        Returns:
            ValidationResult with all check results
        """
        results = [check(df) for check in self._checks]

        for result in results:
            if not result.passed:
                logger.warning(
                    f"Validation failed: {result.name}",
                    message=result.message,
                    severity=result.severity.value,
                )

        passed_checks = sum(1 for r in results if r.passed)
        failed_checks = sum(1 for r in results if not r.passed and r.severity == ValidationSeverity.ERROR)
        warning_count = sum(1 for r in results if not r.passed and r.severity == ValidationSeverity.WARNING)

        if failed_checks > 0:
            status = ValidationStatus.FAILED
        elif warning_count > 0:
            status = ValidationStatus.PARTIAL
        else:
            status = ValidationStatus.PASSED

        logger.info(
            f"Validation complete: {status.value}",
            passed=passed_checks,
            failed=failed_checks,
            warnings=warning_count,
        )

        return ValidationResult(
            status=status,
            total_checks=len(results),
            passed_checks=passed_checks,
            failed_checks=failed_checks,
            warning_count=warning_count,
            checks=results,
            completed_at=datetime.utcnow(),
        )


def create_transactions_validator() -> TransactionValidator:
    """Create the default validator for normalized transactions"""
    return (
        TransactionValidator()
        .add_not_null_check("created", severity=ValidationSeverity.WARNING)
        .add_unique_check("id", severity=ValidationSeverity.WARNING)
        .add_single_value_check("currency", severity=ValidationSeverity.WARNING)
        .add_enum_check("type", [t.value for t in TransactionType])
        .add_custom_check(
            name="has_subscription_revenue",
            check_func=lambda df: df.is_empty() or (df["type"] == TransactionType.SUBSCRIPTION.value).any(),
            message_on_fail="No subscription transactions found; ARR metrics will be zero",
            severity=ValidationSeverity.WARNING,
        )
    )
