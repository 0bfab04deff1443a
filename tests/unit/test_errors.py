"""
test_errors.py - Tests for error taxonomy and aggregation
"""

import pytest

from floorweave.errors import (
    ErrorAggregator,
    ErrorCategory,
    ErrorCode,
    ErrorSeverity,
    FloorweaveError,
    LayoutInfeasibleError,
    StructuralInvalidError,
    create_layout_error,
    create_state_error,
    create_structural_error,
    create_sync_warning,
)


class TestIssueFactories:
    """Tests for the create_* helpers."""

    def test_structural(self):
        issue = create_structural_error(ErrorCode.STR_OVERLAP, "overlap", space_id="A", door_index=2)
        assert issue.category == ErrorCategory.STRUCTURAL
        assert issue.severity == ErrorSeverity.ERROR
        assert issue.is_error
        assert issue.door_index == 2

    def test_layout_warning(self):
        issue = create_layout_error("pending", space_id="A", severity=ErrorSeverity.WARNING)
        assert issue.category == ErrorCategory.LAYOUT
        assert issue.code == ErrorCode.LAY_NO_ACCESS
        assert not issue.is_error

    def test_sync_warning(self):
        issue = create_sync_warning("no room", space_id="B", detail="too narrow")
        assert issue.code == ErrorCode.SYN_UNSATISFIABLE
        assert issue.severity == ErrorSeverity.WARNING
        assert issue.detail == "too narrow"

    def test_state(self):
        issue = create_state_error(ErrorCode.STA_UNKNOWN_SPACE, "missing", space_id="Q")
        assert issue.category == ErrorCategory.STATE

    def test_to_dict_uses_plain_values(self):
        data = create_structural_error(ErrorCode.STR_OUT_OF_BOUNDS, "oob", space_id="A").to_dict()
        assert data["code"] == 1002
        assert data["category"] == "structural"
        assert data["severity"] == "error"
        assert data["space_id"] == "A"


class TestExceptions:
    """Tests for exception types."""

    def test_carries_issues(self):
        issue = create_structural_error(ErrorCode.STR_OVERLAP, "overlap")
        with pytest.raises(FloorweaveError) as exc_info:
            raise StructuralInvalidError("bad door", [issue])
        assert exc_info.value.message == "bad door"
        assert exc_info.value.issues == [issue]
        assert str(exc_info.value) == "bad door"

    def test_to_dict(self):
        error = LayoutInfeasibleError("no layout", [create_layout_error("C has no doors", "C")])
        data = error.to_dict()
        assert data["error"] == "LayoutInfeasibleError"
        assert data["issues"][0]["space_id"] == "C"

    def test_issues_default_empty(self):
        assert FloorweaveError("plain").issues == []


class TestErrorAggregator:
    """Tests for ErrorAggregator and ErrorReport."""

    @pytest.fixture
    def aggregator(self):
        aggregator = ErrorAggregator()
        aggregator.add_all([
            create_layout_error('"C" has no doors', "C"),
            create_layout_error('"D" has no doors', "D"),
            create_sync_warning("no room", "B"),
        ])
        return aggregator

    def test_queries(self, aggregator):
        assert len(aggregator) == 3
        assert aggregator.has_errors()
        assert len(aggregator.get_by_severity(ErrorSeverity.WARNING)) == 1
        assert len(aggregator.get_by_category(ErrorCategory.LAYOUT)) == 2
        assert [i.space_id for i in aggregator.get_by_space("C")] == ["C"]
        assert aggregator.get_by_space("Z") == []

    def test_report(self, aggregator):
        report = aggregator.generate_report()
        assert report.total_issues == 3
        assert report.by_severity == {"warning": 1, "error": 2}
        assert report.by_category == {"layout": 2, "sync": 1}
        assert report.summary == "2 error(s) found"
        assert len(report.errors) == 2
        assert len(report.warnings) == 1

    def test_itemized(self):
        aggregator = ErrorAggregator()
        aggregator.add(create_layout_error("first", "A"))
        aggregator.add(create_layout_error("second", "B"))
        assert aggregator.generate_report().itemized() == "1. first\n2. second"

    def test_warning_only_summary(self):
        aggregator = ErrorAggregator()
        aggregator.add(create_sync_warning("no room", "B"))
        assert aggregator.generate_report().summary == "1 warning(s) found"
        assert not aggregator.has_errors()

    def test_clear(self, aggregator):
        aggregator.clear()
        assert len(aggregator) == 0
        assert aggregator.generate_report().summary == "No significant issues"
