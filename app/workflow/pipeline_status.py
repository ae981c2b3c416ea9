"""
Candidate pipeline status derivation.

The status users see for a candidate is a projection of its interview
history plus the explicit override written by the offer/contract
workflow. It is computed here, in one place, and never stored.

Priority (first match wins):
1. An override status (offer/contract/conversion/rejection/withdrawal).
2. A failed interview at any stage -> rejected.
3. The most senior stage with a record: pass -> "<stage> done",
   scheduled -> "<stage> planned", otherwise fall through.
4. sourced.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Union

from app.models.candidate import CandidateStatus
from app.models.interview import InterviewOutcome, InterviewStage

OVERRIDE_STATUSES = frozenset({
    CandidateStatus.CONVERTED_TO_CONSULTANT,
    CandidateStatus.CONTRACT_SIGNED,
    CandidateStatus.CONTRACT_SENT,
    CandidateStatus.OFFER_APPROVED,
    CandidateStatus.OFFER_PENDING,
    CandidateStatus.OFFER_REJECTED,
    CandidateStatus.REJECTED,
    CandidateStatus.WITHDRAWN,
})

# Most senior first
STAGE_ORDER = (
    InterviewStage.DIRECTOR_INTERVIEW,
    InterviewStage.TECHNICAL_INTERVIEW,
    InterviewStage.PHONE_QUALIFICATION,
)

_STAGE_STATUSES = {
    InterviewStage.PHONE_QUALIFICATION: (CandidateStatus.PHONE_DONE, CandidateStatus.PHONE_PLANNED),
    InterviewStage.TECHNICAL_INTERVIEW: (CandidateStatus.TECHNICAL_DONE, CandidateStatus.TECHNICAL_PLANNED),
    InterviewStage.DIRECTOR_INTERVIEW: (CandidateStatus.DIRECTOR_DONE, CandidateStatus.DIRECTOR_PLANNED),
}

STATUS_LABELS: Dict[CandidateStatus, str] = {
    CandidateStatus.SOURCED: "Sourced",
    CandidateStatus.PHONE_PLANNED: "Phone Qualification Planned",
    CandidateStatus.PHONE_DONE: "Phone Qualification Done",
    CandidateStatus.TECHNICAL_PLANNED: "Technical Interview Planned",
    CandidateStatus.TECHNICAL_DONE: "Technical Interview Done",
    CandidateStatus.DIRECTOR_PLANNED: "Director Interview Planned",
    CandidateStatus.DIRECTOR_DONE: "Director Interview Done",
    CandidateStatus.OFFER_PENDING: "Offer Pending",
    CandidateStatus.OFFER_APPROVED: "Offer Approved",
    CandidateStatus.OFFER_REJECTED: "Offer Rejected",
    CandidateStatus.CONTRACT_SENT: "Contract Sent",
    CandidateStatus.CONTRACT_SIGNED: "Contract Signed",
    CandidateStatus.CONVERTED_TO_CONSULTANT: "Converted to Consultant",
    CandidateStatus.REJECTED: "Rejected",
    CandidateStatus.WITHDRAWN: "Withdrawn",
}


@dataclass(frozen=True)
class PipelineStatus:
    status: CandidateStatus
    label: str


def _status(status: CandidateStatus) -> PipelineStatus:
    return PipelineStatus(status=status, label=STATUS_LABELS[status])


def _as_override(explicit_status: Optional[Union[str, CandidateStatus]]) -> Optional[CandidateStatus]:
    if explicit_status is None:
        return None
    try:
        status = CandidateStatus(explicit_status)
    except ValueError:
        return None
    return status if status in OVERRIDE_STATUSES else None


def _decisive(interviews: List) -> Optional[InterviewOutcome]:
    """
    Collapse duplicate interviews of one stage into their most decisive
    outcome: fail beats pass beats scheduled. None when nothing is decisive.
    """
    outcomes = {i.outcome for i in interviews}
    if InterviewOutcome.FAIL in outcomes:
        return InterviewOutcome.FAIL
    if InterviewOutcome.PASS in outcomes:
        return InterviewOutcome.PASS
    if any(i.scheduled_at is not None for i in interviews):
        return InterviewOutcome.PENDING
    return None


def compute_candidate_pipeline_status(
    interviews: Iterable,
    explicit_status: Optional[Union[str, CandidateStatus]] = None,
) -> PipelineStatus:
    override = _as_override(explicit_status)
    if override is not None:
        return _status(override)

    by_stage: Dict[InterviewStage, List] = {stage: [] for stage in STAGE_ORDER}
    for interview in interviews:
        by_stage[InterviewStage(interview.stage)].append(interview)

    # A fail at any stage is terminal, whatever the later stages say
    if any(_decisive(records) == InterviewOutcome.FAIL for records in by_stage.values()):
        return _status(CandidateStatus.REJECTED)

    for stage in STAGE_ORDER:
        decisive = _decisive(by_stage[stage])
        done, planned = _STAGE_STATUSES[stage]
        if decisive == InterviewOutcome.PASS:
            return _status(done)
        if decisive == InterviewOutcome.PENDING:
            return _status(planned)

    return _status(CandidateStatus.SOURCED)
