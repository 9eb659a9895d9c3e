# backend/app/services/reconciliation/result.py
"""
Import result accumulator.

Collects the counters and line-numbered diagnostics produced while a batch
is reconciled. Diagnostics are plain strings of the form
"line <n>: <message>"; file-level problems use line 0.
"""

from dataclasses import dataclass, field


# =============================================================================
# RESULT DATA CLASS
# =============================================================================

@dataclass
class ImportResult:
    """
    Outcome of one import batch.

    Attributes:
        success_count: Rows that completed the final phase
        failed_count: Failures recorded in any phase
        errors: Diagnostics in the order they were recorded
    """

    success_count: int = 0
    failed_count: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def total_count(self) -> int:
        return self.success_count + self.failed_count

    def add_error(self, line_number: int, message: str) -> None:
        """Record a diagnostic without counting a failure."""
        self.errors.append(f"line {line_number}: {message}")

    def add_failure(self, line_number: int, message: str) -> None:
        """Record a diagnostic and count a failure."""
        self.add_error(line_number, message)
        self.failed_count += 1

    def record_success(self) -> None:
        self.success_count += 1

    @classmethod
    def fatal(cls, message: str) -> "ImportResult":
        """A result for a batch that was aborted before any phase ran."""
        result = cls()
        result.add_error(0, message)
        return result
