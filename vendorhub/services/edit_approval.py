from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable

from vendorhub.canonical.edit_request import Decision, EditRequestRecord, ReviewState
from vendorhub.canonical.vendor import VendorRecord
from vendorhub.core.errors import InvalidStateTransition

_TRANSITIONS: dict[tuple[str, str], ReviewState] = {
    ("pending", "approve"): "approved",
    ("pending", "reject"): "rejected",
}


def next_state(current: str, decision: Decision, *, request_id: str = "?") -> ReviewState:
    try:
        return _TRANSITIONS[(current, decision)]
    except KeyError:
        raise InvalidStateTransition("edit_request", request_id, current, decision) from None


def _reviewed(
    request: EditRequestRecord,
    decision: Decision,
    remark: str | None,
    reviewer: str | None,
    now: datetime | None,
) -> EditRequestRecord:
    state = next_state(request.review_state, decision, request_id=request.id)
    return request.model_copy(update={
        "review_state": state,
        "remark": remark,
        "reviewed_by": reviewer,
        "reviewed_at": now or datetime.now(timezone.utc),
    })


def approve(
    request: EditRequestRecord,
    vendor: VendorRecord,
    *,
    remark: str | None = None,
    reviewer: str | None = None,
    now: datetime | None = None,
) -> tuple[EditRequestRecord, VendorRecord]:
    """
    pending -> approved. Returns the reviewed request and the vendor with the
    proposed changes overwritten key by key into form_data. `seen` is untouched.
    """
    if vendor.id != request.vendor_id:
        raise ValueError(f"edit request {request.id} targets vendor {request.vendor_id}, not {vendor.id}")
    reviewed = _reviewed(request, "approve", remark, reviewer, now)
    return reviewed, vendor.with_form_data(request.changes)


def reject(
    request: EditRequestRecord,
    *,
    remark: str | None = None,
    reviewer: str | None = None,
    now: datetime | None = None,
) -> EditRequestRecord:
    """pending -> rejected. The proposed changes are discarded."""
    return _reviewed(request, "reject", remark, reviewer, now)


def mark_seen(request: EditRequestRecord) -> EditRequestRecord:
    # idempotent; review state is not consulted
    if request.seen:
        return request
    return request.model_copy(update={"seen": True})


def unread_count(requests: Iterable[EditRequestRecord]) -> int:
    return sum(1 for r in requests if not r.seen)
