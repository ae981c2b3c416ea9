"""
Permission resolver.

Maps the set of role tags held by a user onto a capability record. A
capability is granted when ANY held role grants it. Identity flags are
computed from role membership directly, not from the merged capabilities.

Pure and total: unknown or empty role sets resolve to all-false.
"""

import enum
from dataclasses import dataclass, fields
from typing import Dict, FrozenSet, Iterable, Optional, Union


class Role(str, enum.Enum):
    SUPERADMIN = "superadmin"
    ADMIN = "admin"
    BUSINESS_DIRECTOR = "business_director"
    BUSINESS_MANAGER = "business_manager"
    TECHNICAL_DIRECTOR = "technical_director"
    TECHNICAL = "technical"
    RECRUITER_MANAGER = "recruiter_manager"
    RECRUITER = "recruiter"
    HR_MANAGER = "hr_manager"
    HR = "hr"
    CONSULTANT = "consultant"


class Capability(str, enum.Enum):
    """Each value is the name of the matching field on Permissions."""
    VIEW_CANDIDATES = "can_view_candidates"
    ADD_CANDIDATES = "can_add_candidates"
    EDIT_CANDIDATES = "can_edit_candidates"
    DELETE_CANDIDATES = "can_delete_candidates"
    HARD_DELETE = "can_hard_delete"

    VIEW_REQUIREMENTS = "can_view_requirements"
    CREATE_REQUIREMENTS = "can_create_requirements"
    EDIT_REQUIREMENTS = "can_edit_requirements"
    DELETE_REQUIREMENTS = "can_delete_requirements"

    VIEW_INTERVIEWS = "can_view_interviews"
    SCHEDULE_INTERVIEWS = "can_schedule_interviews"
    CONDUCT_INTERVIEWS = "can_conduct_interviews"
    VIEW_ALL_INTERVIEW_FEEDBACK = "can_view_all_interview_feedback"

    VIEW_CONTRACTS = "can_view_contracts"
    CREATE_CONTRACTS = "can_create_contracts"
    APPROVE_CONTRACTS = "can_approve_contracts"
    CONVERT_CANDIDATES = "can_convert_candidates"

    MANAGE_BIDS = "can_manage_bids"
    CREATE_PROJECTS = "can_create_projects"
    CREATE_MISSIONS = "can_create_missions"
    MANAGE_MISSIONS = "can_manage_missions"

    REQUEST_HR_CHANGES = "can_request_hr_changes"
    DIRECTOR_APPROVE = "can_director_approve"
    HR_APPROVE = "can_hr_approve"
    MANAGE_HR_TICKETS = "can_manage_hr_tickets"

    VIEW_ORGANISATION = "can_view_organisation"
    MANAGE_USERS = "can_manage_users"
    MANAGE_BUSINESS_UNITS = "can_manage_business_units"
    MANAGE_APPROVAL_CHAINS = "can_manage_approval_chains"


C = Capability

_INTERVIEWING = frozenset({
    C.VIEW_INTERVIEWS, C.SCHEDULE_INTERVIEWS, C.CONDUCT_INTERVIEWS, C.VIEW_ALL_INTERVIEW_FEEDBACK,
})
_REQUIREMENTS = frozenset({C.VIEW_REQUIREMENTS, C.CREATE_REQUIREMENTS, C.EDIT_REQUIREMENTS})

ROLE_GRANTS: Dict[Role, FrozenSet[Capability]] = {
    Role.SUPERADMIN: frozenset(Capability),
    Role.ADMIN: frozenset(Capability) - {C.HARD_DELETE},
    Role.BUSINESS_DIRECTOR: _INTERVIEWING | _REQUIREMENTS | {
        C.VIEW_CANDIDATES,
        C.VIEW_CONTRACTS, C.CREATE_CONTRACTS, C.APPROVE_CONTRACTS,
        C.MANAGE_BIDS, C.CREATE_PROJECTS, C.CREATE_MISSIONS,
        C.REQUEST_HR_CHANGES, C.DIRECTOR_APPROVE,
        C.VIEW_ORGANISATION,
    },
    Role.BUSINESS_MANAGER: _INTERVIEWING | _REQUIREMENTS | {
        C.VIEW_CANDIDATES, C.ADD_CANDIDATES, C.EDIT_CANDIDATES,
        C.VIEW_CONTRACTS, C.CREATE_CONTRACTS,
        C.MANAGE_BIDS, C.CREATE_PROJECTS, C.CREATE_MISSIONS,
        C.REQUEST_HR_CHANGES,
        C.VIEW_ORGANISATION,
    },
    Role.TECHNICAL_DIRECTOR: _INTERVIEWING | {
        C.VIEW_CANDIDATES, C.VIEW_REQUIREMENTS,
        C.VIEW_CONTRACTS, C.APPROVE_CONTRACTS,
        C.REQUEST_HR_CHANGES, C.DIRECTOR_APPROVE,
        C.VIEW_ORGANISATION,
    },
    Role.TECHNICAL: frozenset({
        C.VIEW_CANDIDATES, C.VIEW_REQUIREMENTS, C.VIEW_INTERVIEWS, C.CONDUCT_INTERVIEWS,
    }),
    Role.RECRUITER_MANAGER: _INTERVIEWING | {
        C.VIEW_CANDIDATES, C.ADD_CANDIDATES, C.EDIT_CANDIDATES, C.DELETE_CANDIDATES,
        C.VIEW_REQUIREMENTS,
        C.VIEW_CONTRACTS, C.CREATE_CONTRACTS,
        C.VIEW_ORGANISATION,
    },
    Role.RECRUITER: frozenset({
        C.VIEW_CANDIDATES, C.ADD_CANDIDATES, C.EDIT_CANDIDATES,
        C.VIEW_REQUIREMENTS,
        C.VIEW_INTERVIEWS, C.SCHEDULE_INTERVIEWS, C.CONDUCT_INTERVIEWS,  # Phone qualification
    }),
    Role.HR_MANAGER: frozenset({
        C.VIEW_CANDIDATES, C.VIEW_CONTRACTS, C.CONVERT_CANDIDATES,
        C.HR_APPROVE, C.MANAGE_HR_TICKETS,
        C.VIEW_ORGANISATION, C.MANAGE_APPROVAL_CHAINS,
    }),
    Role.HR: frozenset({
        C.VIEW_CANDIDATES, C.VIEW_CONTRACTS, C.CONVERT_CANDIDATES,
        C.HR_APPROVE, C.MANAGE_HR_TICKETS, C.VIEW_ORGANISATION,
    }),
    Role.CONSULTANT: frozenset(),
}


@dataclass(frozen=True)
class Permissions:
    can_view_candidates: bool = False
    can_add_candidates: bool = False
    can_edit_candidates: bool = False
    can_delete_candidates: bool = False
    can_hard_delete: bool = False

    can_view_requirements: bool = False
    can_create_requirements: bool = False
    can_edit_requirements: bool = False
    can_delete_requirements: bool = False

    can_view_interviews: bool = False
    can_schedule_interviews: bool = False
    can_conduct_interviews: bool = False
    can_view_all_interview_feedback: bool = False

    can_view_contracts: bool = False
    can_create_contracts: bool = False
    can_approve_contracts: bool = False
    can_convert_candidates: bool = False

    can_manage_bids: bool = False
    can_create_projects: bool = False
    can_create_missions: bool = False
    can_manage_missions: bool = False

    can_request_hr_changes: bool = False
    can_director_approve: bool = False
    can_hr_approve: bool = False
    can_manage_hr_tickets: bool = False

    can_view_organisation: bool = False
    can_manage_users: bool = False
    can_manage_business_units: bool = False
    can_manage_approval_chains: bool = False

    # Identity flags (role membership, not capability merge)
    is_super_admin: bool = False
    is_admin: bool = False
    is_director: bool = False
    is_hr: bool = False
    is_consultant: bool = False

    def has(self, capability: Capability) -> bool:
        return getattr(self, capability.value)


DEFAULT_PERMISSIONS = Permissions()


def parse_roles(role_tags: Optional[Iterable[Union[str, Role]]]) -> FrozenSet[Role]:
    """Convert raw role tags to Role members, dropping anything unknown."""
    roles = set()
    for tag in role_tags or ():
        try:
            roles.add(Role(tag))
        except ValueError:
            continue
    return frozenset(roles)


def resolve_permissions(role_tags: Optional[Iterable[Union[str, Role]]]) -> Permissions:
    roles = parse_roles(role_tags)
    if not roles:
        return DEFAULT_PERMISSIONS

    granted = frozenset().union(*(ROLE_GRANTS[role] for role in roles))

    return Permissions(
        **{capability.value: capability in granted for capability in Capability},
        is_super_admin=Role.SUPERADMIN in roles,
        is_admin=bool(roles & {Role.ADMIN, Role.SUPERADMIN}),
        is_director=bool(roles & {Role.BUSINESS_DIRECTOR, Role.TECHNICAL_DIRECTOR}),
        is_hr=bool(roles & {Role.HR, Role.HR_MANAGER}),
        is_consultant=Role.CONSULTANT in roles,
    )


def capability_fields() -> FrozenSet[str]:
    """Names of all capability fields on Permissions (identity flags excluded)."""
    return frozenset(f.name for f in fields(Permissions) if f.name.startswith("can_"))
