from __future__ import annotations

from ..models.dataset_kind import DatasetKind
from ..models.import_result import ImportResult

"""SUMMARY line rendering for the CLI."""

__all__ = [
    "render_summary_line",
    "format_elapsed",
]


def format_elapsed(seconds: float) -> str:
    """Render seconds without scientific notation and without trailing zeros."""
    if seconds <= 0:
        return "0"
    if seconds == int(seconds):
        return str(int(seconds))
    if seconds < 0.01:
        return f"{seconds:.6f}".rstrip("0").rstrip(".")
    return f"{seconds:.3f}".rstrip("0").rstrip(".")


def render_summary_line(kind: DatasetKind, result: ImportResult, elapsed_seconds: float) -> str:
    """Render the summary of one import.

    Format:
    SUMMARY kind={kind} success={true|false} imported={n} warnings={n} errors={n} elapsed_sec={s}

    >>> render_summary_line(DatasetKind.VOC, ImportResult(True, 7, (), ("w",) * 3), 2.0)
    'SUMMARY kind=voc success=true imported=7 warnings=3 errors=0 elapsed_sec=2'
    """
    return (
        f"SUMMARY kind={kind.value} "
        f"success={'true' if result.success else 'false'} "
        f"imported={result.imported} "
        f"warnings={len(result.warnings)} "
        f"errors={len(result.errors)} "
        f"elapsed_sec={format_elapsed(elapsed_seconds)}"
    )
