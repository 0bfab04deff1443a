"""
errors/aggregator.py - Aggregate and report issues
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List
from datetime import datetime
import uuid

from .taxonomy import EngineIssue, ErrorCategory, ErrorSeverity


@dataclass
class ErrorReport:
    """Aggregated issue report."""

    report_id: str = ""
    created_at: datetime = field(default_factory=datetime.utcnow)

    # Counts
    total_issues: int = 0
    by_severity: Dict[str, int] = field(default_factory=dict)
    by_category: Dict[str, int] = field(default_factory=dict)

    summary: str = ""

    all_issues: List[EngineIssue] = field(default_factory=list)

    @property
    def errors(self) -> List[EngineIssue]:
        return [i for i in self.all_issues if i.severity == ErrorSeverity.ERROR]

    @property
    def warnings(self) -> List[EngineIssue]:
        return [i for i in self.all_issues if i.severity == ErrorSeverity.WARNING]

    def itemized(self) -> str:
        """Numbered, one-line-per-issue listing."""
        return "\n".join(
            f"{idx}. {issue.message}" for idx, issue in enumerate(self.all_issues, start=1)
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "report_id": self.report_id,
            "total_issues": self.total_issues,
            "by_severity": self.by_severity,
            "by_category": self.by_category,
            "summary": self.summary,
            "issues": [i.to_dict() for i in self.all_issues],
        }


class ErrorAggregator:
    """
    Aggregates issues from multiple sources.
    """

    def __init__(self):
        self._issues: List[EngineIssue] = []
        self._by_space: Dict[str, List[EngineIssue]] = {}

    def __len__(self) -> int:
        return len(self._issues)

    def add(self, issue: EngineIssue) -> None:
        """Add an issue."""
        self._issues.append(issue)

        if issue.space_id is not None:
            self._by_space.setdefault(issue.space_id, []).append(issue)

    def add_all(self, issues: List[EngineIssue]) -> None:
        """Add multiple issues."""
        for issue in issues:
            self.add(issue)

    @property
    def issues(self) -> List[EngineIssue]:
        return list(self._issues)

    def get_by_severity(self, severity: ErrorSeverity) -> List[EngineIssue]:
        return [i for i in self._issues if i.severity == severity]

    def get_by_category(self, category: ErrorCategory) -> List[EngineIssue]:
        return [i for i in self._issues if i.category == category]

    def get_by_space(self, space_id: str) -> List[EngineIssue]:
        return self._by_space.get(space_id, [])

    def has_errors(self) -> bool:
        """Check if any errors (not just warnings)."""
        return any(i.severity == ErrorSeverity.ERROR for i in self._issues)

    def generate_report(self) -> ErrorReport:
        """Generate aggregated report."""
        report = ErrorReport(
            report_id=str(uuid.uuid4())[:8],
            total_issues=len(self._issues),
        )

        for severity in ErrorSeverity:
            count = sum(1 for i in self._issues if i.severity == severity)
            if count > 0:
                report.by_severity[severity.value] = count

        for category in ErrorCategory:
            count = sum(1 for i in self._issues if i.category == category)
            if count > 0:
                report.by_category[category.value] = count

        if report.by_severity.get("error", 0) > 0:
            report.summary = f"{report.by_severity['error']} error(s) found"
        elif report.by_severity.get("warning", 0) > 0:
            report.summary = f"{report.by_severity['warning']} warning(s) found"
        else:
            report.summary = "No significant issues"

        report.all_issues = self._issues.copy()

        return report

    def clear(self) -> None:
        self._issues.clear()
        self._by_space.clear()
