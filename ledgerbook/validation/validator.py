"""
Two-Stage Record Validation

DESIGN DECISION: Validation happens in two distinct stages:

STAGE 1 - SCHEMA VALIDATION:
- Required content (descriptions, titles, the person an entry belongs to)
- Zero amounts
- Types and ranges are already enforced by the pydantic models

STAGE 2 - SEMANTIC VALIDATION:
- Future date detection
- Absurd amount detection
- Monthly limit overrun for staff entries

Stage 2 only runs when stage 1 passes.

IMPORTANT: Validation NEVER silently fixes a record. An over-limit entry
is reported as a warning and can still be saved; only errors block.
"""

from datetime import date, timedelta
from decimal import Decimal
from typing import Callable, Iterable, Optional

from ledgerbook.config import AppSettings, get_settings
from ledgerbook.ledger.balances import monthly_remaining_limit
from ledgerbook.ledger.periods import local_today
from ledgerbook.models.records import (
    ZERO,
    CommodityRecord,
    EntityType,
    MonthKey,
    MonthlyNote,
    Person,
    PersonLedgerEntry,
    Transaction,
)
from ledgerbook.models.validation import ValidationIssue, ValidationResult


class RecordValidator:
    """
    Validates records before they are saved.

    Needs no storage access: anything it compares against (the person,
    their existing entries) is handed in by the caller.
    """

    def __init__(
        self,
        settings: Optional[AppSettings] = None,
        today: Optional[Callable[[], date]] = None,
    ):
        self._settings = settings or get_settings().app
        self._today = today or local_today

    # -------------------------------------------------------------------------
    # Shared checks
    # -------------------------------------------------------------------------

    def _check_date(self, field: str, value: date) -> list[ValidationIssue]:
        issues = []
        today = self._today()

        max_future_date = today + timedelta(days=self._settings.future_date_tolerance_days)
        if value > max_future_date:
            issues.append(ValidationIssue(
                field=field,
                issue_type="future_date",
                message=f"Date ({value}) is in the future",
                severity="warning",
                suggested_fix="Please verify the date is correct",
            ))

        # Probably a typo in the year
        if value < today - timedelta(days=365 * 2):
            issues.append(ValidationIssue(
                field=field,
                issue_type="suspicious_date",
                message=f"Date ({value}) is more than two years old",
                severity="info",
            ))
        return issues

    def _check_amount(self, field: str, amount: Decimal) -> list[ValidationIssue]:
        max_amount = Decimal(str(self._settings.max_reasonable_amount))
        if abs(amount) > max_amount:
            return [ValidationIssue(
                field=field,
                issue_type="suspicious_value",
                message=f"Amount ({amount:,.2f}) seems unusually high",
                severity="warning",
                suggested_fix="Please verify this amount is correct",
            )]
        return []

    @staticmethod
    def _missing(field: str, message: str) -> ValidationIssue:
        return ValidationIssue(
            field=field,
            issue_type="missing",
            message=message,
            severity="error",
        )

    @staticmethod
    def _zero_amount(field: str) -> ValidationIssue:
        return ValidationIssue(
            field=field,
            issue_type="zero_amount",
            message="Amount is zero",
            severity="warning",
            suggested_fix="Check that the amount was entered",
        )

    @staticmethod
    def _result(
        entity_type: EntityType,
        record_id: str,
        schema_issues: list[ValidationIssue],
        semantic_issues: Optional[list[ValidationIssue]],
    ) -> ValidationResult:
        schema_valid = not any(i.severity == "error" for i in schema_issues)
        all_issues = schema_issues + (semantic_issues or [])
        return ValidationResult(
            entity_type=entity_type,
            record_id=record_id,
            schema_valid=schema_valid,
            semantic_valid=(
                semantic_issues is not None
                and not any(i.severity == "error" for i in semantic_issues)
            ),
            issues=all_issues,
            warnings=[i.message for i in all_issues if i.severity == "warning"],
        )

    # -------------------------------------------------------------------------
    # Per record type
    # -------------------------------------------------------------------------

    def validate_transaction(self, transaction: Transaction) -> ValidationResult:
        schema = []
        if not transaction.description:
            schema.append(self._missing("description", "Description is required"))
        if transaction.amount == ZERO:
            schema.append(self._zero_amount("amount"))

        semantic = None
        if not any(i.severity == "error" for i in schema):
            semantic = (
                self._check_date("date", transaction.date)
                + self._check_amount("amount", transaction.amount)
            )
        return self._result(EntityType.TRANSACTION, transaction.id, schema, semantic)

    def validate_person(self, person: Person) -> ValidationResult:
        schema = []
        if person.monthly_limit == ZERO:
            schema.append(ValidationIssue(
                field="monthly_limit",
                issue_type="no_limit",
                message=f"No monthly limit set for {person.name}",
                severity="info",
            ))
        semantic = self._check_amount("opening_balance", person.opening_balance)
        return self._result(EntityType.PERSON, person.id, schema, semantic)

    def validate_person_entry(
        self,
        entry: PersonLedgerEntry,
        person: Optional[Person],
        existing_entries: Iterable[PersonLedgerEntry] = (),
    ) -> ValidationResult:
        """
        Validate a staff ledger entry.

        Args:
            entry: The entry about to be saved
            person: The person it belongs to, None if it does not resolve
            existing_entries: The person's stored entries; an entry with the
                same id is treated as the one being replaced
        """
        schema = []
        if person is None:
            schema.append(self._missing("person_id", f"Person {entry.person_id} not found"))
        if not entry.description:
            schema.append(self._missing("description", "Description is required"))
        if entry.amount == ZERO:
            schema.append(self._zero_amount("amount"))

        semantic = None
        if not any(i.severity == "error" for i in schema):
            semantic = (
                self._check_date("date", entry.date)
                + self._check_amount("amount", entry.amount)
            )
            semantic.extend(self._check_limit(entry, person, existing_entries))
        return self._result(EntityType.PERSON_ENTRY, entry.id, schema, semantic)

    def _check_limit(
        self,
        entry: PersonLedgerEntry,
        person: Person,
        existing_entries: Iterable[PersonLedgerEntry],
    ) -> list[ValidationIssue]:
        if person.monthly_limit == ZERO:
            return []

        month = MonthKey.of(entry.date)
        after_save = [e for e in existing_entries if e.id != entry.id] + [entry]
        remaining = monthly_remaining_limit(person, after_save, month)
        if remaining >= 0:
            return []
        return [ValidationIssue(
            field="amount",
            issue_type="over_limit",
            message=(
                f"{person.name} will be {abs(remaining):,.2f} over their "
                f"monthly limit for {month.label}"
            ),
            severity="warning",
        )]

    def validate_commodity_record(self, record: CommodityRecord) -> ValidationResult:
        schema = []
        if record.quantity == ZERO:
            schema.append(ValidationIssue(
                field="quantity",
                issue_type="zero_amount",
                message="Quantity is zero",
                severity="warning",
            ))
        if record.unit_price == ZERO:
            schema.append(ValidationIssue(
                field="unit_price",
                issue_type="zero_amount",
                message="Rate is zero",
                severity="warning",
            ))

        semantic = (
            self._check_date("date", record.date)
            + self._check_amount("payment_given", record.payment_given)
            + self._check_amount("line_total", record.line_total)
        )
        return self._result(EntityType.COMMODITY_RECORD, record.id, schema, semantic)

    def validate_monthly_note(self, note: MonthlyNote) -> ValidationResult:
        schema = []
        if not note.title:
            schema.append(self._missing("title", "Title is required"))

        semantic = None
        if not any(i.severity == "error" for i in schema):
            semantic = self._check_amount("amount", note.amount)
        return self._result(EntityType.MONTHLY_NOTE, note.id, schema, semantic)

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """
        Generate a short summary of validation results.

        This is what the form shows before saving.
        """
        if not result.issues:
            return "✅ All checks passed."

        lines = []
        if result.errors:
            lines.append("❌ Please fix the following before saving:")
            for issue in result.errors:
                lines.append(f"   • {issue.message}")
                if issue.suggested_fix:
                    lines.append(f"     💡 {issue.suggested_fix}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("⚠️ Please verify the following:")
            for warning in result.warnings:
                lines.append(f"   • {warning}")

        if result.can_save and result.warnings:
            lines.append("")
            lines.append("You can still save, but please review carefully.")

        return "\n".join(lines)
