"""Tests for RemediationRecord and StepResult models.

Test coverage for plan item validation rules.
"""

from __future__ import annotations

import pytest

from src.models.remediation_record import (
    RemediationAction,
    RemediationRecord,
    RemediationStatus,
    StepResult,
)


def _record(status: RemediationStatus, **kwargs) -> RemediationRecord:
    return RemediationRecord(
        step="namespaces",
        kind="namespace",
        identifier=kwargs.pop("identifier", "ns2"),
        action=RemediationAction.DELETE,
        status=status,
        **kwargs,
    )


class TestRemediationRecord:
    """Test suite for RemediationRecord model."""

    def test_succeeded_record_validates(self) -> None:
        """Test a plain succeeded record is valid."""
        assert _record(RemediationStatus.SUCCEEDED).validate() is True

    def test_failed_requires_error_message(self) -> None:
        """Test failed status requires an error message."""
        with pytest.raises(ValueError, match="error_message"):
            _record(RemediationStatus.FAILED).validate()

    def test_skipped_requires_reason(self) -> None:
        """Test skipped status requires a skip reason."""
        with pytest.raises(ValueError, match="skip_reason"):
            _record(RemediationStatus.SKIPPED).validate()

    def test_succeeded_cannot_carry_error(self) -> None:
        """Test succeeded status rejects an error message."""
        with pytest.raises(ValueError, match="cannot have an error"):
            _record(RemediationStatus.SUCCEEDED, error_message="boom").validate()

    def test_succeeded_may_carry_warning(self) -> None:
        """Test a wait timeout warning does not invalidate success."""
        record = _record(RemediationStatus.SUCCEEDED, warning="ns2 not fully deleted yet.")

        assert record.validate() is True

    def test_identifier_required(self) -> None:
        """Test records need an identifier."""
        with pytest.raises(ValueError, match="identifier"):
            _record(RemediationStatus.PLANNED, identifier="").validate()

    def test_to_dict_uses_enum_values(self) -> None:
        """Test serialization flattens enums."""
        data = _record(RemediationStatus.SKIPPED, skip_reason="protected").to_dict()

        assert data["action"] == "delete"
        assert data["status"] == "skipped"
        assert data["skip_reason"] == "protected"
        assert "timestamp" in data


class TestStepResult:
    """Test suite for StepResult."""

    def test_counts_by_status(self) -> None:
        """Test per-status counting."""
        step = StepResult(name="namespaces")
        step.add(_record(RemediationStatus.SUCCEEDED, identifier="a"))
        step.add(_record(RemediationStatus.SUCCEEDED, identifier="b"))
        step.add(_record(RemediationStatus.FAILED, identifier="c", error_message="denied"))

        assert step.count(RemediationStatus.SUCCEEDED) == 2
        assert step.count(RemediationStatus.FAILED) == 1
        assert step.has_failures is True

    def test_empty_step_has_no_failures(self) -> None:
        """Test an empty step."""
        assert StepResult(name="secrets").has_failures is False

    def test_add_rejects_invalid_record(self) -> None:
        """Test records are validated as they are added."""
        step = StepResult(name="namespaces")

        with pytest.raises(ValueError, match="error_message"):
            step.add(_record(RemediationStatus.FAILED))

        assert step.records == []
