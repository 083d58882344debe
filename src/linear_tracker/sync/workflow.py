"""Per-team workflow state lookup with memoization."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..models import RemoteStateType, WorkflowState

if TYPE_CHECKING:
    from ..linear.client import LinearClient

logger = logging.getLogger(__name__)


class WorkflowStateResolver:
    """Resolve abstract state types to concrete Linear workflow state ids.

    The state list of each team is fetched once on first use and kept for
    the lifetime of the resolver. Remote workflow changes are not observed
    until ``clear()`` is called.
    """

    def __init__(self, client: LinearClient) -> None:
        self._client = client
        self._states: dict[str, list[WorkflowState]] = {}  # team_id -> states

    def get_states(self, team_id: str) -> list[WorkflowState]:
        """Get the workflow states for a team, fetching on first use.

        Raises:
            LinearClientError: If the fetch fails (nothing is memoized then)
        """
        if not team_id:
            return []

        cached = self._states.get(team_id)
        if cached is not None:
            return cached

        states = self._client.get_team_states(team_id)
        self._states[team_id] = states
        logger.debug(
            "Fetched %d workflow states for team %s: %s",
            len(states),
            team_id,
            [f"{s.name} ({s.type})" for s in states],
        )
        return states

    def find_state_by_type(
        self, team_id: str, target_type: str | RemoteStateType
    ) -> str | None:
        """Return the id of the first state of ``target_type``, or None.

        ``None`` is a normal outcome: a team workflow may lack a category.
        """
        wanted = target_type.value if isinstance(target_type, RemoteStateType) else target_type
        for state in self.get_states(team_id):
            if state.type == wanted:
                return state.id
        logger.warning("No '%s' workflow state found for team %s", wanted, team_id)
        return None

    def is_cached(self, team_id: str) -> bool:
        return team_id in self._states

    def clear(self) -> None:
        self._states.clear()
