from __future__ import annotations

from arhiva_dosare.models.import_result import ImportOutcome

"""SUMMARY line rendering for an import run."""


def _format_seconds(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # avoid scientific notation for very small numbers
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{value:.3f}".rstrip("0").rstrip(".")


def render_summary_line(outcome: ImportOutcome) -> str:
    """Render the SUMMARY line for one import.

    Format:
    SUMMARY file={name} status={status} inserted={n} updated={n} skipped={n}
    elapsed_sec={s} [error={ERROR_TYPE}] [rolled_back=true]

    Examples:
        >>> from pathlib import Path
        >>> from arhiva_dosare.models.import_result import ImportStatus, ReconcileResult
        >>> o = ImportOutcome(Path("inv.xlsx"), "i1", ImportStatus.SUCCESS, ReconcileResult(2, 0, 1))
        >>> render_summary_line(o)
        'SUMMARY file=inv.xlsx status=success inserted=2 updated=0 skipped=1 elapsed_sec=0'
    """
    line = (
        f"SUMMARY file={outcome.name} "
        f"status={outcome.status.value} "
        f"inserted={outcome.counts.inserted} "
        f"updated={outcome.counts.updated} "
        f"skipped={outcome.counts.skipped} "
        f"elapsed_sec={_format_seconds(outcome.elapsed_seconds)}"
    )
    if outcome.error_type:
        line += f" error={outcome.error_type}"
    if outcome.rolled_back:
        line += " rolled_back=true"
    return line
