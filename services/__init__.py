"""
Services layer for business logic orchestration.

Provides reusable services that can be consumed by the CLI, scripts, or a web frontend.
"""

from services.record_service import (
    AdjustmentResult,
    Journal,
    RecordResult,
    delete_adjustment,
    delete_record,
    list_adjustments,
    list_records,
    load_journal,
    print_record_result,
    save_adjustment,
    save_record,
)
from services.target_service import (
    TargetResult,
    delete_target,
    get_all_progress,
    list_targets,
    set_target,
)
from services.report_service import (
    build_report,
    default_export_name,
    export_csv,
    export_excel,
)

__all__ = [
    # Record service
    "AdjustmentResult",
    "Journal",
    "RecordResult",
    "delete_adjustment",
    "delete_record",
    "list_adjustments",
    "list_records",
    "load_journal",
    "print_record_result",
    "save_adjustment",
    "save_record",
    # Target service
    "TargetResult",
    "delete_target",
    "get_all_progress",
    "list_targets",
    "set_target",
    # Report service
    "build_report",
    "default_export_name",
    "export_csv",
    "export_excel",
]
