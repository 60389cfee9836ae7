"""Role permission matrix: reconciliation, cascade rules and payload assembly.

The matrix is one row per catalog page. Each row carries an action bundle
whose ``create``/``update``/``delete`` flags imply ``view``. The per-row
"select all" indicator is never stored on its own; it is derived from the
four cascade flags every time it is read, so it cannot drift from them.
"""

from __future__ import annotations

import logging
from threading import RLock
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from admin_console.schemas.permission import (
    ActionBundle,
    MatrixRow,
    Page,
    PagePermission,
    PermissionRow,
    ToggleEvent,
)
from admin_console.schemas.role import RolePermissionPayload, RoleSubmission

logger = logging.getLogger("admin_console.services.permission_matrix")

CASCADE_FLAGS = ("create", "update", "delete", "view")

AggregateState = Dict[str, bool]


def is_all_selected(actions: ActionBundle) -> bool:
    return actions.create and actions.update and actions.delete and actions.view


def is_view_locked(actions: ActionBundle) -> bool:
    """The view control is disabled while any mutating flag is set."""

    return actions.mutating


def reconcile_permissions(
    catalog: Sequence[Page],
    existing: Optional[Iterable[PagePermission]] = None,
) -> List[PermissionRow]:
    """Join the page catalog with a role's stored permissions.

    Rows follow catalog order. Stored entries for pages that are no longer
    in the catalog are dropped.
    """

    bundles: Dict[str, ActionBundle] = {}
    for page in catalog:
        if page.name in bundles:
            logger.warning("permission_matrix_duplicate_page", extra={"page_name": page.name})
            continue
        bundles[page.name] = ActionBundle()

    dropped: List[str] = []
    for permission in existing or ():
        if permission.page_name not in bundles:
            dropped.append(permission.page_name)
            continue
        bundles[permission.page_name] = permission.actions

    if dropped:
        logger.info(
            "permission_matrix_orphans_dropped",
            extra={"page_names": dropped, "count": len(dropped)},
        )

    return [PermissionRow(page_name=name, actions=actions) for name, actions in bundles.items()]


def initialize_aggregate(rows: Iterable[PermissionRow]) -> AggregateState:
    return {row.page_name: is_all_selected(row.actions) for row in rows}


def to_matrix_rows(rows: Iterable[PermissionRow]) -> List[MatrixRow]:
    return [
        MatrixRow(
            page_name=row.page_name,
            actions=row.actions,
            all_selected=is_all_selected(row.actions),
            view_locked=is_view_locked(row.actions),
        )
        for row in rows
    ]


def initialize_matrix(
    catalog: Sequence[Page],
    existing: Optional[Iterable[PagePermission]] = None,
) -> List[MatrixRow]:
    """Reconcile and mark each row's select-all state in one pass."""

    return to_matrix_rows(reconcile_permissions(catalog, existing))


def transition(actions: ActionBundle, event: ToggleEvent) -> ActionBundle:
    """Return the bundle that results from applying ``event``.

    Total over every reachable state: unchecking ``view`` while a mutating
    flag is set leaves the bundle unchanged instead of failing.
    """

    if event.action == "all":
        return actions.model_copy(update={flag: event.value for flag in CASCADE_FLAGS})

    if event.action == "view":
        if not event.value and actions.mutating:
            return actions
        return actions.model_copy(update={"view": event.value})

    updates = {event.action: event.value}
    if event.value:
        updates["view"] = True
    return actions.model_copy(update=updates)


def _with_actions(row: PermissionRow, actions: ActionBundle) -> PermissionRow:
    updates: Dict[str, object] = {"actions": actions}
    if isinstance(row, MatrixRow):
        updates["all_selected"] = is_all_selected(actions)
        updates["view_locked"] = is_view_locked(actions)
    return row.model_copy(update=updates)


def apply_toggle(
    rows: Sequence[PermissionRow],
    page_name: str,
    event: ToggleEvent,
) -> Tuple[List[PermissionRow], AggregateState]:
    """Apply one toggle to the row named ``page_name``.

    The input rows are left untouched. An unknown page name is a no-op.
    """

    result: List[PermissionRow] = []
    matched = False
    for row in rows:
        if row.page_name == page_name and not matched:
            matched = True
            row = _with_actions(row, transition(row.actions, event))
        result.append(row)

    if not matched:
        logger.warning(
            "permission_matrix_unknown_page",
            extra={"page_name": page_name, "action": event.action},
        )

    return result, initialize_aggregate(result)


def assemble_payload(name: str, description: str, rows: Iterable[PermissionRow]) -> RoleSubmission:
    """Flatten edited rows into the content API role payload.

    Raises ``pydantic.ValidationError`` when name or description is blank.
    """

    return RoleSubmission(
        name=name,
        description=description,
        permissions=[RolePermissionPayload(name=row.page_name, actions=row.actions) for row in rows],
    )


class PermissionMatrix:
    """Editable matrix owned by a single role-editing session.

    Requests for one session may be served from different worker threads;
    every read and the read-modify-write in ``toggle`` hold the lock.
    """

    def __init__(self, rows: Iterable[PermissionRow]) -> None:
        self._rows: List[PermissionRow] = list(rows)
        self._lock = RLock()

    @classmethod
    def from_catalog(
        cls,
        catalog: Sequence[Page],
        existing: Optional[Iterable[PagePermission]] = None,
    ) -> "PermissionMatrix":
        return cls(reconcile_permissions(catalog, existing))

    def __len__(self) -> int:
        with self._lock:
            return len(self._rows)

    def __contains__(self, page_name: object) -> bool:
        return self.row(page_name) is not None  # type: ignore[arg-type]

    @property
    def rows(self) -> List[PermissionRow]:
        with self._lock:
            return list(self._rows)

    @property
    def aggregate(self) -> AggregateState:
        with self._lock:
            return initialize_aggregate(self._rows)

    def row(self, page_name: str) -> Optional[PermissionRow]:
        with self._lock:
            for row in self._rows:
                if row.page_name == page_name:
                    return row
        return None

    def view_locked(self, page_name: str) -> bool:
        """Whether the presenter must disable the view control; False for unknown pages."""

        row = self.row(page_name)
        return row is not None and is_view_locked(row.actions)

    def toggle(self, page_name: str, event: ToggleEvent) -> AggregateState:
        with self._lock:
            self._rows, aggregate = apply_toggle(self._rows, page_name, event)
        return aggregate

    def view_rows(self) -> List[MatrixRow]:
        return to_matrix_rows(self.rows)

    def to_payload(self, name: str, description: str) -> RoleSubmission:
        return assemble_payload(name, description, self.rows)
