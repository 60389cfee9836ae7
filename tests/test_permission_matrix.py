from __future__ import annotations

import itertools
from concurrent.futures import ThreadPoolExecutor

import pytest
from pydantic import ValidationError

from admin_console.schemas.permission import ActionBundle, Page, PagePermission, PermissionRow, ToggleEvent
from admin_console.services.permission_matrix import (
    PermissionMatrix,
    apply_toggle,
    assemble_payload,
    initialize_aggregate,
    initialize_matrix,
    is_all_selected,
    reconcile_permissions,
    transition,
)

CATALOG = [Page(name="Users"), Page(name="Roles")]
ALL_ON = ActionBundle(create=True, update=True, delete=True, view=True)


def _row(rows, name):
    return next(row for row in rows if row.page_name == name)


def test_create_mode_rows_default_to_all_false() -> None:
    rows = initialize_matrix(CATALOG)

    assert [row.page_name for row in rows] == ["Users", "Roles"]
    for row in rows:
        assert row.actions == ActionBundle()
        assert row.all_selected is False
        assert row.view_locked is False


def test_existing_permissions_are_merged_and_marked_all_selected() -> None:
    existing = [PagePermission(page_name="Roles", actions=ALL_ON)]

    rows = initialize_matrix(CATALOG, existing)

    users, roles = _row(rows, "Users"), _row(rows, "Roles")
    assert users.actions == ActionBundle()
    assert users.all_selected is False
    assert roles.actions == ALL_ON
    assert roles.all_selected is True
    assert roles.view_locked is True


def test_reconcile_keeps_catalog_order_and_drops_orphans() -> None:
    catalog = [Page(name=name) for name in ("Home", "News", "Users", "Roles")]
    existing = [
        PagePermission(page_name="Roles", actions=ActionBundle(view=True)),
        PagePermission(page_name="Retired Page", actions=ALL_ON),
        PagePermission(page_name="Home", actions=ActionBundle(create=True, view=True)),
    ]

    rows = reconcile_permissions(catalog, existing)

    assert [row.page_name for row in rows] == ["Home", "News", "Users", "Roles"]
    assert "Retired Page" not in {row.page_name for row in rows}
    assert _row(rows, "Home").actions.create is True
    assert _row(rows, "Roles").actions.view is True
    assert _row(rows, "News").actions == ActionBundle()


def test_reconcile_duplicate_catalog_names_keep_first_row() -> None:
    rows = reconcile_permissions([Page(name="Users"), Page(name="Users"), Page(name="Roles")])

    assert [row.page_name for row in rows] == ["Users", "Roles"]


def test_reconcile_carries_extra_flags_through() -> None:
    bundle = ActionBundle.model_validate({"view": True, "approval": True, "import": True, "export": True})

    rows = reconcile_permissions(CATALOG, [PagePermission(page_name="Users", actions=bundle)])

    users = _row(rows, "Users")
    assert users.actions.approval is True
    assert users.actions.import_ is True
    assert users.actions.export is True


def test_checking_create_forces_view_without_touching_siblings() -> None:
    rows = reconcile_permissions(CATALOG)

    rows, aggregate = apply_toggle(rows, "Users", ToggleEvent(action="create", value=True))

    users = _row(rows, "Users")
    assert users.actions.create is True
    assert users.actions.view is True
    assert users.actions.update is False
    assert users.actions.delete is False
    assert aggregate == {"Users": False, "Roles": False}


def test_checking_remaining_flags_selects_all_then_unchecking_clears_it() -> None:
    rows = reconcile_permissions(CATALOG)
    for action in ("create", "update", "delete"):
        rows, aggregate = apply_toggle(rows, "Users", ToggleEvent(action=action, value=True))

    assert aggregate["Users"] is True

    rows, aggregate = apply_toggle(rows, "Users", ToggleEvent(action="delete", value=False))

    users = _row(rows, "Users")
    assert aggregate["Users"] is False
    assert users.actions.create is True
    assert users.actions.update is True
    assert users.actions.view is True
    assert users.actions.delete is False


def test_unchecking_mutating_flag_leaves_view_checked() -> None:
    rows = reconcile_permissions(CATALOG)
    rows, _ = apply_toggle(rows, "Users", ToggleEvent(action="update", value=True))
    rows, _ = apply_toggle(rows, "Users", ToggleEvent(action="update", value=False))

    users = _row(rows, "Users")
    assert users.actions.update is False
    assert users.actions.view is True


@pytest.mark.parametrize("start", [ActionBundle(), ALL_ON, ActionBundle(create=True, view=True)])
def test_toggle_all_off_clears_every_flag(start: ActionBundle) -> None:
    rows = reconcile_permissions(CATALOG, [PagePermission(page_name="Users", actions=start)])

    rows, aggregate = apply_toggle(rows, "Users", ToggleEvent(action="all", value=False))

    users = _row(rows, "Users")
    assert (users.actions.create, users.actions.update, users.actions.delete, users.actions.view) == (
        False,
        False,
        False,
        False,
    )
    assert aggregate["Users"] is False


def test_toggle_all_on_is_idempotent() -> None:
    rows = reconcile_permissions(CATALOG)

    once, aggregate_once = apply_toggle(rows, "Roles", ToggleEvent(action="all", value=True))
    twice, aggregate_twice = apply_toggle(once, "Roles", ToggleEvent(action="all", value=True))

    assert once == twice
    assert aggregate_once == aggregate_twice == {"Users": False, "Roles": True}


def test_toggle_all_preserves_extra_flags() -> None:
    bundle = ActionBundle.model_validate({"approval": True, "export": True})
    rows = reconcile_permissions(CATALOG, [PagePermission(page_name="Users", actions=bundle)])

    rows, _ = apply_toggle(rows, "Users", ToggleEvent(action="all", value=True))

    users = _row(rows, "Users")
    assert users.actions.approval is True
    assert users.actions.export is True
    assert users.actions.import_ is False


def test_unchecking_view_is_ignored_while_mutating_flag_set() -> None:
    locked = ActionBundle(delete=True, view=True)

    assert transition(locked, ToggleEvent(action="view", value=False)) == locked


def test_view_toggles_freely_when_no_mutating_flag_set() -> None:
    on = transition(ActionBundle(), ToggleEvent(action="view", value=True))
    off = transition(on, ToggleEvent(action="view", value=False))

    assert on.view is True
    assert off == ActionBundle()


def test_apply_toggle_does_not_mutate_input_rows() -> None:
    rows = reconcile_permissions(CATALOG)
    before = list(rows)

    apply_toggle(rows, "Users", ToggleEvent(action="all", value=True))

    assert rows == before
    assert rows[0].actions == ActionBundle()


def test_apply_toggle_unknown_page_is_noop() -> None:
    rows = reconcile_permissions(CATALOG)

    result, aggregate = apply_toggle(rows, "Missing", ToggleEvent(action="create", value=True))

    assert result == rows
    assert aggregate == {"Users": False, "Roles": False}


def test_apply_toggle_refreshes_matrix_row_view_fields() -> None:
    rows = initialize_matrix(CATALOG)

    rows, _ = apply_toggle(rows, "Users", ToggleEvent(action="all", value=True))

    users = _row(rows, "Users")
    assert users.all_selected is True
    assert users.view_locked is True


def test_invariants_hold_for_every_event_sequence() -> None:
    events = [
        ToggleEvent(action=action, value=value)
        for action in ("create", "update", "delete", "view", "all")
        for value in (True, False)
    ]

    for sequence in itertools.product(events, repeat=3):
        rows = reconcile_permissions([Page(name="Users")])
        for event in sequence:
            rows, aggregate = apply_toggle(rows, "Users", event)
            actions = rows[0].actions
            if actions.create or actions.update or actions.delete:
                assert actions.view
            assert aggregate["Users"] == is_all_selected(actions)
            if event.action in ("create", "update", "delete") and not event.value:
                assert aggregate["Users"] is False


def test_initialize_aggregate_marks_only_fully_checked_rows() -> None:
    rows = [
        PermissionRow(page_name="Users", actions=ALL_ON),
        PermissionRow(page_name="Roles", actions=ActionBundle(create=True, update=True, view=True)),
    ]

    assert initialize_aggregate(rows) == {"Users": True, "Roles": False}


def test_assemble_payload_uses_wire_shape() -> None:
    rows = reconcile_permissions(CATALOG, [PagePermission(page_name="Roles", actions=ALL_ON)])

    payload = assemble_payload(" Editor ", "Edits content", rows)
    body = payload.model_dump(by_alias=True)

    assert body["name"] == "Editor"
    assert body["description"] == "Edits content"
    assert [item["name"] for item in body["permissions"]] == ["Users", "Roles"]
    assert body["permissions"][1]["actions"] == {
        "create": True,
        "update": True,
        "delete": True,
        "view": True,
        "approval": False,
        "import": False,
        "export": False,
    }


@pytest.mark.parametrize("name,description", [("", "desc"), ("Editor", "   ")])
def test_assemble_payload_requires_name_and_description(name: str, description: str) -> None:
    with pytest.raises(ValidationError):
        assemble_payload(name, description, reconcile_permissions(CATALOG))


def test_permission_matrix_owns_its_rows() -> None:
    first = PermissionMatrix.from_catalog(CATALOG)
    second = PermissionMatrix.from_catalog(CATALOG)

    aggregate = first.toggle("Users", ToggleEvent(action="all", value=True))

    assert aggregate == {"Users": True, "Roles": False}
    assert second.aggregate == {"Users": False, "Roles": False}
    assert "Users" in first
    assert first.row("Missing") is None
    assert len(first) == 2
    assert first.to_payload("Editor", "desc").permissions[0].actions == ALL_ON


def test_view_locked_follows_mutating_flags_and_ignores_unknown_pages() -> None:
    matrix = PermissionMatrix.from_catalog(CATALOG)

    assert matrix.view_locked("Users") is False
    matrix.toggle("Users", ToggleEvent(action="delete", value=True))
    assert matrix.view_locked("Users") is True
    assert matrix.view_locked("Roles") is False
    assert matrix.view_locked("Missing") is False

    matrix.toggle("Users", ToggleEvent(action="delete", value=False))
    assert matrix.view_locked("Users") is False


def test_concurrent_toggles_on_distinct_pages_are_all_kept() -> None:
    catalog = [Page(name=f"P{index}") for index in range(64)]
    matrix = PermissionMatrix.from_catalog(catalog)

    def select_all(page_name: str) -> None:
        matrix.toggle(page_name, ToggleEvent(action="all", value=True))

    for _ in range(5):
        with ThreadPoolExecutor(max_workers=64) as pool:
            list(pool.map(select_all, [page.name for page in catalog]))
        assert all(matrix.aggregate.values())
        for page in catalog:
            matrix.toggle(page.name, ToggleEvent(action="all", value=False))
        assert not any(matrix.aggregate.values())
