"""SessionGate - decides whether a protected view renders or redirects."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from examcell.auth.exceptions import UnknownRoleError
from examcell.auth.models import HOME_PATH, LOGIN_PATH, GateDecision, Role, Session

logger = logging.getLogger("examcell.auth.gate")

RoleSpec = Iterable[Role | str] | None


def _normalize_roles(allowed_roles: RoleSpec) -> frozenset[Role]:
    roles: set[Role] = set()
    for tag in allowed_roles or ():
        try:
            roles.add(Role.parse(tag))
        except UnknownRoleError:
            logger.warning("Ignoring unknown role %r in allow-list", tag)
    return frozenset(roles)


def decide(
    session: Session | None,
    allowed_roles: RoleSpec,
    *,
    resolved: bool = True,
) -> GateDecision:
    """Pure decision table for a protected view.

    Args:
        session: Current session, or None when anonymous.
        allowed_roles: Roles allowed to see the view. Empty or None means any
            authenticated role.
        resolved: False while the session is still being loaded.

    Returns:
        The gate decision. Never raises.
    """
    if not resolved:
        return GateDecision.PENDING
    if session is None:
        return GateDecision.REDIRECT_LOGIN
    roles = _normalize_roles(allowed_roles)
    if roles and session.role not in roles:
        return GateDecision.REDIRECT_HOME
    return GateDecision.RENDER


def redirect_target(decision: GateDecision) -> str | None:
    """Navigation target for a decision, or None when it does not redirect."""
    if decision is GateDecision.REDIRECT_LOGIN:
        return LOGIN_PATH
    if decision is GateDecision.REDIRECT_HOME:
        return HOME_PATH
    return None


class SessionGate:
    """Gate for one mounted view.

    Wraps ``decide`` and performs the redirect side effect, at most once per
    change of outcome.
    """

    def __init__(self, navigate: Callable[[str], None]) -> None:
        """Initialize the gate.

        Args:
            navigate: Called with the target path when a redirect is due.
        """
        self._navigate = navigate
        self._last_decision: GateDecision | None = None

    @property
    def last_decision(self) -> GateDecision | None:
        return self._last_decision

    def evaluate(
        self,
        session: Session | None,
        allowed_roles: RoleSpec = None,
        path: str = HOME_PATH,
        *,
        resolved: bool = True,
    ) -> GateDecision:
        """Evaluate the gate and navigate if a new redirect is due.

        Args:
            session: Current session, or None.
            allowed_roles: Roles allowed on this view.
            path: Path of the view being evaluated.
            resolved: False while the session is still being loaded.

        Returns:
            The gate decision.
        """
        decision = decide(session, allowed_roles, resolved=resolved)
        previous = self._last_decision
        self._last_decision = decision

        if decision is previous:
            return decision

        target = redirect_target(decision)
        if target is None or target == path:
            return decision

        if decision is GateDecision.REDIRECT_HOME and session is not None:
            logger.warning("Access denied for role %s on %s", session.role.value, path)
        else:
            logger.info("No session on %s, redirecting to %s", path, target)
        self._navigate(target)
        return decision

    def reset(self) -> None:
        """Forget the last outcome (the view was re-mounted)."""
        self._last_decision = None
