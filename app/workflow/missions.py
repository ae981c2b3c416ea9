"""
Mission lifecycle and the reciprocal consultant bench/in_mission status.

Statuses carry no total order, but a non-admin may only move a mission
forward into `completed` (by giving its end date) or edit its end date and
notes. Anything else, including reopening a completed mission, needs the
manage_missions capability.
"""

from datetime import date, datetime
from typing import Any, Dict, Iterable, Optional

from app.core.exceptions import ConflictError, PermissionDeniedError, ValidationError
from app.models.consultant import ConsultantStatus
from app.models.mission import MissionStatus
from app.workflow.effects import EntityType, TransitionResult, UpdateEffect, guard
from app.workflow.guards import require_capability, require_date_order, require_positive, utcnow
from app.workflow.permissions import Capability, Permissions

EDITABLE_FIELDS = frozenset({
    "name", "start_date", "end_date", "sold_daily_rate", "location", "work_mode", "notes", "status",
})
SELF_SERVICE_FIELDS = frozenset({"end_date", "notes"})
REQUIRED_FIELDS = frozenset({"name", "start_date", "end_date", "sold_daily_rate", "work_mode", "status"})

_ENDED = (MissionStatus.COMPLETED, MissionStatus.CANCELLED)


def consultant_status_after(consultant, other_missions: Iterable, mission_active: bool) -> Optional[ConsultantStatus]:
    """
    Status the consultant should move to once one of its missions changes.

    Only bench and in_mission are driven by missions; a consultant on
    leave or terminated keeps its status. None means no change.
    """
    if consultant is None or consultant.status not in (ConsultantStatus.BENCH, ConsultantStatus.IN_MISSION):
        return None
    busy = mission_active or any(m.status == MissionStatus.ACTIVE for m in other_missions)
    target = ConsultantStatus.IN_MISSION if busy else ConsultantStatus.BENCH
    return None if target == consultant.status else target


def decide_update_mission(
    mission,
    consultant,
    other_missions: Iterable,
    changes: Dict[str, Any],
    permissions: Permissions,
    now: Optional[datetime] = None,
    expected_version: Optional[int] = None,
) -> TransitionResult:
    """
    Apply an edit to a mission, enforcing the self-service limits.

    `other_missions` are the consultant's missions other than this one,
    re-read by the caller so the bench decision sees current data.
    """
    require_capability(permissions, Capability.CREATE_MISSIONS, "edit a mission")

    unknown = set(changes) - EDITABLE_FIELDS
    if unknown:
        raise ValidationError(
            f"Mission fields cannot be edited: {', '.join(sorted(unknown))}",
            entity=EntityType.MISSION.value,
            entity_id=mission.id,
            field=sorted(unknown)[0],
        )

    cleared = sorted(field for field in REQUIRED_FIELDS if field in changes and changes[field] is None)
    if cleared:
        raise ValidationError(
            f"Mission fields cannot be cleared: {', '.join(cleared)}",
            entity=EntityType.MISSION.value,
            entity_id=mission.id,
            field=cleared[0],
        )

    new_status = MissionStatus(changes.get("status", mission.status))
    is_admin = permissions.has(Capability.MANAGE_MISSIONS)

    if not is_admin:
        _check_self_service(mission, changes, new_status)

    updated: Dict[str, Any] = dict(changes)
    if "status" in updated:
        updated["status"] = new_status

    start_date = updated.get("start_date", mission.start_date)
    end_date = updated.get("end_date", mission.end_date)
    require_date_order(start_date, end_date, EntityType.MISSION, mission.id)
    if "sold_daily_rate" in updated:
        require_positive(updated["sold_daily_rate"], EntityType.MISSION, mission.id, "sold_daily_rate")

    if new_status == MissionStatus.COMPLETED and mission.status != MissionStatus.COMPLETED:
        if "end_date" not in changes:
            raise ValidationError(
                f"An end date is required to complete mission {mission.id}",
                entity=EntityType.MISSION.value,
                entity_id=mission.id,
                field="end_date",
            )
        updated["completed_at"] = now or utcnow()
    elif mission.status == MissionStatus.COMPLETED and new_status != MissionStatus.COMPLETED:
        updated["completed_at"] = None

    effects = [UpdateEffect(
        EntityType.MISSION, mission.id, updated, expected=guard(mission, expected_version=expected_version),
    )]

    if new_status != mission.status:
        other_missions = list(other_missions)
        target = consultant_status_after(consultant, other_missions, new_status == MissionStatus.ACTIVE)
        if consultant is not None and consultant.status in (ConsultantStatus.BENCH, ConsultantStatus.IN_MISSION):
            # The bench decision holds only while the other missions keep their status
            effects.extend(
                UpdateEffect(EntityType.MISSION, other.id, {}, expected={"status": other.status})
                for other in other_missions
            )
        if target is not None:
            effects.append(UpdateEffect(
                EntityType.CONSULTANT,
                consultant.id,
                {"status": target},
                expected=guard(consultant, with_version=False),
            ))

    return TransitionResult(
        effects=effects,
        summary=f"Mission {mission.id} updated ({new_status.value})",
    )


def decide_complete_mission(
    mission,
    consultant,
    other_missions: Iterable,
    end_date: date,
    permissions: Permissions,
    now: Optional[datetime] = None,
    expected_version: Optional[int] = None,
) -> TransitionResult:
    if mission.status == MissionStatus.COMPLETED:
        raise ConflictError(
            f"Mission {mission.id} is already completed",
            entity=EntityType.MISSION.value,
            entity_id=mission.id,
            expected=[s for s in MissionStatus if s != MissionStatus.COMPLETED],
            actual=mission.status,
        )
    return decide_update_mission(
        mission,
        consultant,
        other_missions,
        {"status": MissionStatus.COMPLETED, "end_date": end_date},
        permissions,
        now=now,
        expected_version=expected_version,
    )


def _check_self_service(mission, changes: Dict[str, Any], new_status: MissionStatus) -> None:
    restricted = set(changes) - SELF_SERVICE_FIELDS - {"status"}
    if restricted:
        raise PermissionDeniedError(
            f"Only mission managers can change {', '.join(sorted(restricted))} on mission {mission.id}",
            entity=EntityType.MISSION.value,
            entity_id=mission.id,
            field=sorted(restricted)[0],
        )
    if new_status == mission.status:
        return
    if mission.status in _ENDED:
        raise PermissionDeniedError(
            f"Only mission managers can reopen mission {mission.id} from '{mission.status.value}'",
            entity=EntityType.MISSION.value,
            entity_id=mission.id,
            field="status",
        )
    if new_status != MissionStatus.COMPLETED:
        raise PermissionDeniedError(
            f"Mission {mission.id} can only be moved to 'completed' without the manage_missions permission",
            entity=EntityType.MISSION.value,
            entity_id=mission.id,
            field="status",
        )
