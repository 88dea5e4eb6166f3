"""Data-integrity audit for stored squads.

The checks look for the damage that older transfer code left behind:
missing or impossible role baselines, negative or inflated banked points,
and counters that disagree with the transfer history.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, List, Literal, Optional, Tuple

from pyleague.ledger.points import compute_squad_points
from pyleague.models.history import ReversalMarkerEntry
from pyleague.models.player import PlayerEntry, PlayerPool
from pyleague.models.squad import Squad, SquadRole


Severity = Literal["critical", "warning", "info"]

DEFAULT_BANKED_WARN_RATIO = 0.5

_ROLE_LABELS = {
    SquadRole.CAPTAIN: "Captain",
    SquadRole.VICE_CAPTAIN: "Vice-Captain",
    SquadRole.X_FACTOR: "X-Factor",
}
_SHORT_LABELS = {
    SquadRole.CAPTAIN: "Captain",
    SquadRole.VICE_CAPTAIN: "VC",
    SquadRole.X_FACTOR: "X-Factor",
}


@dataclass(frozen=True)
class RoleTimestampCheck:
    valid: bool
    warning: Optional[str] = None


@dataclass
class SquadIssue:
    squad_id: str
    squad_name: str
    user_id: str
    league_id: str
    issues: List[str] = field(default_factory=list)
    severity: Severity = "info"
    suggested_fix: Optional[str] = None

    def escalate(self, severity: Severity) -> None:
        if severity == "critical" or self.severity == "info":
            self.severity = severity

    def to_dict(self) -> dict:
        return {
            "squadId": self.squad_id,
            "squadName": self.squad_name,
            "userId": self.user_id,
            "leagueId": self.league_id,
            "issues": list(self.issues),
            "severity": self.severity,
            "suggestedFix": self.suggested_fix,
        }


@dataclass
class AuditReport:
    league_id: Optional[str]
    total_squads: int
    issues: List[SquadIssue]
    timestamp: datetime

    @property
    def squads_with_issues(self) -> int:
        return len(self.issues)

    @property
    def critical_issues(self) -> int:
        return sum(1 for issue in self.issues if issue.severity == "critical")

    @property
    def warnings(self) -> int:
        return sum(1 for issue in self.issues if issue.severity == "warning")

    def to_dict(self) -> dict:
        return {
            "leagueId": self.league_id,
            "totalSquads": self.total_squads,
            "squadsWithIssues": self.squads_with_issues,
            "criticalIssues": self.critical_issues,
            "warnings": self.warnings,
            "issues": [issue.to_dict() for issue in self.issues],
            "timestamp": self.timestamp.isoformat(),
        }


def validate_role_timestamp(entry: PlayerEntry, role: Optional[SquadRole]) -> RoleTimestampCheck:
    """Check the role baseline of a role holder; regular players always pass."""

    if role is None:
        return RoleTimestampCheck(valid=True)

    name = entry.player_name or entry.player_id
    assigned = entry.points_when_role_assigned
    if assigned is None:
        return RoleTimestampCheck(
            valid=False,
            warning=(
                f"{name} is {role.value} but missing pointsWhenRoleAssigned. "
                "This may cause incorrect point calculations."
            ),
        )
    if assigned < entry.points_at_joining:
        return RoleTimestampCheck(
            valid=False,
            warning=(
                f"{name} has pointsWhenRoleAssigned ({assigned:g}) less than "
                f"pointsAtJoining ({entry.points_at_joining:g}). Data corruption detected."
            ),
        )
    if assigned > entry.points:
        return RoleTimestampCheck(
            valid=False,
            warning=(
                f"{name} has pointsWhenRoleAssigned ({assigned:g}) greater than "
                f"current points ({entry.points:g}). Data corruption detected."
            ),
        )
    return RoleTimestampCheck(valid=True)


def _role_holders(squad: Squad) -> Iterable[Tuple[SquadRole, str]]:
    for role in SquadRole:
        holder = squad.role_holder(role)
        if holder:
            yield role, holder


def audit_squad(
    squad: Squad,
    squad_size: int,
    *,
    banked_warn_ratio: float = DEFAULT_BANKED_WARN_RATIO,
) -> SquadIssue:
    report = SquadIssue(
        squad_id=squad.id,
        squad_name=squad.squad_name,
        user_id=squad.user_id,
        league_id=squad.league_id,
    )
    missing_baselines: List[str] = []

    for role, holder in _role_holders(squad):
        label = _ROLE_LABELS[role]
        entry = squad.find(holder)
        if entry is None:
            report.issues.append(f"{label} {holder} is not in the squad")
            report.escalate("critical")
            continue
        if not squad.in_main_squad(holder, squad_size):
            report.issues.append(f"{label} ({entry.player_name or holder}) is on the bench")
            report.escalate("critical")
        check = validate_role_timestamp(entry, role)
        if not check.valid:
            report.issues.append(f"{label} ({entry.player_name or holder}): {check.warning}")
            report.escalate("critical")
        if entry.points_when_role_assigned is None:
            missing_baselines.append(_SHORT_LABELS[role])

    if squad.banked_points < 0:
        report.issues.append(f"Negative banked points: {squad.banked_points:.2f}")
        report.escalate("critical")

    recorded = sum(1 for entry in squad.transfer_history if not isinstance(entry, ReversalMarkerEntry))
    declared = squad.bench_transfers_used + squad.flexible_transfers_used + squad.mid_season_transfers_used
    if recorded != declared:
        report.issues.append(f"Transfer count mismatch: {recorded} in history vs {declared} declared")
        report.escalate("warning")

    for entry in squad.players:
        if entry.points_at_joining > entry.points:
            report.issues.append(
                f"{entry.player_name or entry.player_id}: pointsAtJoining ({entry.points_at_joining:g}) "
                f"> current points ({entry.points:g})"
            )
            report.escalate("warning")

    total = compute_squad_points(squad, squad_size).total_points
    if squad.banked_points > 0 and squad.banked_points > total * banked_warn_ratio:
        share = (squad.banked_points / total * 100) if total else 100.0
        report.issues.append(
            f"Suspiciously high banked points: {squad.banked_points:.2f} ({share:.1f}% of total)"
        )
        report.escalate("warning")

    if report.issues:
        if missing_baselines:
            report.suggested_fix = (
                "Set pointsWhenRoleAssigned to pointsAtJoining for "
                f"{', '.join(missing_baselines)} (conservative fix)"
            )
        else:
            report.suggested_fix = "Manual review required"
    return report


def audit_squads(
    squads: Iterable[Squad],
    squad_size: int,
    *,
    league_id: Optional[str] = None,
    banked_warn_ratio: float = DEFAULT_BANKED_WARN_RATIO,
    now: Optional[datetime] = None,
) -> AuditReport:
    issues: List[SquadIssue] = []
    total = 0
    for squad in squads:
        total += 1
        result = audit_squad(squad, squad_size, banked_warn_ratio=banked_warn_ratio)
        if result.issues:
            issues.append(result)
    return AuditReport(
        league_id=league_id,
        total_squads=total,
        issues=issues,
        timestamp=now or datetime.now(timezone.utc),
    )


def repair_role_timestamps(squad: Squad) -> Squad:
    """Set missing role baselines to the join baseline; nothing else changes."""

    holders = {holder for _, holder in _role_holders(squad)}
    players = [
        entry.model_copy(update={"points_when_role_assigned": entry.points_at_joining})
        if entry.player_id in holders and entry.points_when_role_assigned is None
        else entry
        for entry in squad.players
    ]
    return squad.model_copy(update={"players": players})


def sync_pool_points(squad: Squad, pool: PlayerPool) -> Squad:
    """Copy current pool points onto the squad's entries, leaving baselines alone."""

    players = []
    for entry in squad.players:
        pool_player = pool.get(entry.player_id)
        if pool_player is None or pool_player.points == entry.points:
            players.append(entry)
        else:
            players.append(entry.model_copy(update={"points": pool_player.points}))
    return squad.model_copy(update={"players": players})
