"""
Replay dashboards and monitors into a target Datadog account.

Items are processed one at a time. A failing item is recorded with its
error message and the loop moves on; nothing already created in the target
is rolled back, and nothing is retried.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Literal, Optional, Tuple

from ddhub.datadog.client import DatadogAPIError, DatadogClient
from ddhub.datadog.payloads import build_dashboard_request, clean_monitor
from ddhub.logutil import BatchOperationLogger, clogger

SyncKind = Literal["dashboards", "monitors"]

STATUS_SUCCESS = "success"
STATUS_FAILED = "failed"

UNTITLED = "(untitled)"

# (display title used if the item fails, thunk producing the created resource)
_Job = Tuple[str, Callable[[], Dict[str, Any]]]


@dataclass
class SyncItemResult:
    title: str
    status: str
    error_message: str = ""
    target_id: Optional[Any] = None

    @property
    def succeeded(self) -> bool:
        return self.status == STATUS_SUCCESS

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "title": self.title,
            "status": self.status,
            "errorMessage": self.error_message,
        }
        if self.target_id is not None:
            data["targetId"] = self.target_id
        return data


@dataclass
class SyncReport:
    kind: SyncKind
    items: List[SyncItemResult] = field(default_factory=list)

    @property
    def total_count(self) -> int:
        return len(self.items)

    @property
    def success_count(self) -> int:
        return sum(1 for item in self.items if item.succeeded)

    @property
    def failure_count(self) -> int:
        return self.total_count - self.success_count

    def to_dict(self) -> Dict[str, Any]:
        return {
            "data": {self.kind: [item.to_dict() for item in self.items]},
            "totalCount": self.total_count,
            "successCount": self.success_count,
            "failureCount": self.failure_count,
        }


def _error_text(error: Exception) -> str:
    text = str(error).strip()
    return text or type(error).__name__


def _run(kind: SyncKind, jobs: List[_Job], title_key: str) -> SyncReport:
    report = SyncReport(kind=kind)

    with BatchOperationLogger(f"sync_{kind}", total=len(jobs)) as batch:
        for fallback_title, job in jobs:
            try:
                created = job()
                if not isinstance(created, dict):
                    raise DatadogAPIError(
                        f"Unexpected response creating {kind[:-1]}: {type(created).__name__}"
                    )
            except Exception as e:
                # one bad item never aborts the rest of the batch
                result = SyncItemResult(
                    title=fallback_title,
                    status=STATUS_FAILED,
                    error_message=_error_text(e),
                )
            else:
                result = SyncItemResult(
                    title=str(created.get(title_key) or fallback_title),
                    status=STATUS_SUCCESS,
                    target_id=created.get("id"),
                )

            report.items.append(result)
            batch.log_item(result.title, status=result.status, error=result.error_message)

    return report


def _title_of(payload: Any, key: str) -> str:
    if isinstance(payload, dict) and payload.get(key):
        return str(payload[key])
    return UNTITLED


def _require_object(payload: Any) -> Dict[str, Any]:
    if not isinstance(payload, dict):
        raise ValueError("Payload must be a JSON object")
    return payload


# =============================================================================
# Dashboards
# =============================================================================
def replay_dashboards(payloads: Iterable[Any], target: DatadogClient) -> SyncReport:
    """
    Create each dashboard payload in the target account.
    """

    def make_job(payload: Any) -> Callable[[], Dict[str, Any]]:
        return lambda: target.create_dashboard(build_dashboard_request(_require_object(payload)))

    jobs = [(_title_of(p, "title"), make_job(p)) for p in payloads]
    return _run("dashboards", jobs, "title")


def sync_dashboards(
    source: DatadogClient,
    target: DatadogClient,
    filter_title: Optional[str] = None,
) -> SyncReport:
    """
    Copy dashboards from ``source`` to ``target``.

    ``filter_title`` keeps only dashboards whose title contains it
    (case-sensitive). Each dashboard's full definition is fetched from the
    source before it is created in the target.

    Raises:
        DatadogAPIError: the source dashboard list could not be fetched
    """
    summaries = source.list_dashboards()
    if filter_title:
        summaries = [d for d in summaries if filter_title in (d.get("title") or "")]

    clogger.info(
        f"[sync] Copying {len(summaries)} dashboards",
        extra={"source": source.base_url, "target": target.base_url},
    )

    def make_job(summary: Dict[str, Any]) -> Callable[[], Dict[str, Any]]:
        def job() -> Dict[str, Any]:
            dashboard_id = summary.get("id")
            if not dashboard_id:
                raise ValueError("Source dashboard has no id")
            definition = source.get_dashboard(dashboard_id)
            return target.create_dashboard(build_dashboard_request(definition))

        return job

    jobs = [(_title_of(s, "title"), make_job(s)) for s in summaries]
    return _run("dashboards", jobs, "title")


# =============================================================================
# Monitors
# =============================================================================
def replay_monitors(payloads: Iterable[Any], target: DatadogClient) -> SyncReport:
    """
    Clean each monitor payload and create it in the target account.
    """

    def make_job(payload: Any) -> Callable[[], Dict[str, Any]]:
        return lambda: target.create_monitor(clean_monitor(_require_object(payload)))

    jobs = [(_title_of(p, "name"), make_job(p)) for p in payloads]
    return _run("monitors", jobs, "name")


def sync_monitors(
    source: DatadogClient,
    target: DatadogClient,
    filter_tag: Optional[str] = None,
) -> SyncReport:
    """
    Copy monitors from ``source`` to ``target``.

    ``filter_tag`` keeps only monitors with at least one tag containing it.

    Raises:
        DatadogAPIError: the source monitor list could not be fetched
    """
    monitors = source.list_monitors()
    if filter_tag:
        monitors = [
            m for m in monitors if any(filter_tag in str(tag) for tag in (m.get("tags") or []))
        ]

    clogger.info(
        f"[sync] Copying {len(monitors)} monitors",
        extra={"source": source.base_url, "target": target.base_url},
    )
    return replay_monitors(monitors, target)
