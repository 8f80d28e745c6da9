"""Floating quick-action menu entries."""

from __future__ import annotations

from dataclasses import asdict, dataclass

from clientdesk.auth.models import Session


@dataclass(frozen=True)
class QuickAction:
    id: str
    label: str
    description: str
    path: str


QUICK_ACTIONS: tuple[QuickAction, ...] = (
    QuickAction(
        id="add-client",
        label="Add Client",
        description="Create a new client profile in the system",
        path="/addedclients",
    ),
    QuickAction(
        id="create-report",
        label="Create a Report",
        description="Generate financial or performance reports",
        path="/?tab=reports",
    ),
    QuickAction(
        id="edit-table",
        label="Edit Table",
        description="Manage agent performance data",
        path="/?tab=team",
    ),
    QuickAction(
        id="request-order",
        label="Request an Order",
        description="Create a new order request for processing",
        path="/?tab=order-requests",
    ),
)


def quick_actions_for(session: Session | None) -> list[dict[str, str]]:
    """The menu is only shown to authenticated users."""
    if session is None:
        return []
    return [asdict(action) for action in QUICK_ACTIONS]
