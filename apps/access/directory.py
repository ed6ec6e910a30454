"""
Team directory: which employees report directly to which manager.

The resolver never owns this data. It receives a read-only snapshot through
the TeamDirectory interface, so tests use fixture maps and requests use the
company's persisted reporting lines.
"""
from abc import ABC, abstractmethod
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Tuple


# Demo org chart used by the seed command and the test suite:
# Mike Chen (3) manages Sarah Johnson (2) and Lisa Anderson (6),
# Sarah Johnson (2) manages Emily Davis (4), James Wilson (5) manages 7 and 8.
DEMO_MANAGER_TEAMS: Mapping[str, Tuple[str, ...]] = MappingProxyType({
    '3': ('2', '6'),
    '2': ('4',),
    '5': ('7', '8'),
})


class TeamDirectory(ABC):
    """Read-only source of direct-report relationships."""

    @abstractmethod
    def get_reports(self, manager_id: str) -> Tuple[str, ...]:
        """Return the ids of the manager's direct reports (empty if none)."""


class StaticTeamDirectory(TeamDirectory):
    """
    Immutable one-level manager -> reports map.

    Ids are normalized to strings. Report order is preserved and duplicates
    are dropped. The map is flat: a report's own reports are not included.
    """

    def __init__(self, teams: Mapping[str, Iterable] = None):
        snapshot: Dict[str, Tuple[str, ...]] = {}
        for manager_id, reports in (teams or {}).items():
            ordered = []
            for report_id in reports:
                report_id = str(report_id)
                if report_id not in ordered:
                    ordered.append(report_id)
            snapshot[str(manager_id)] = tuple(ordered)
        self._teams = MappingProxyType(snapshot)

    def get_reports(self, manager_id: str) -> Tuple[str, ...]:
        return self._teams.get(str(manager_id), ())

    def as_dict(self) -> Dict[str, list]:
        return {manager_id: list(reports) for manager_id, reports in self._teams.items()}

    def __len__(self):
        return len(self._teams)

    def __repr__(self):
        return f"StaticTeamDirectory({self.as_dict()!r})"


def load_company_directory(company) -> StaticTeamDirectory:
    """
    Snapshot the reporting lines of one company.

    Only lines between active members of the company are included. Called
    once per request; nothing is cached between requests.
    """
    from apps.companies.models import ReportingLine

    lines = (
        ReportingLine.objects.active_for_company(company)
        .order_by('created_at', 'id')
        .values_list('manager_id', 'report_id')
    )
    teams: Dict[str, list] = {}
    for manager_id, report_id in lines:
        teams.setdefault(str(manager_id), []).append(str(report_id))
    return StaticTeamDirectory(teams)
