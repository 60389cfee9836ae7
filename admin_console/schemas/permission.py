"""Page and permission schemas."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

ToggleAction = Literal["create", "update", "delete", "view", "all"]


class Page(BaseModel):
    """A manageable application route, identified by its name."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str = Field(..., min_length=1)
    id: Optional[str] = Field(default=None, alias="_id")
    route: Optional[str] = None
    group: Optional[str] = None
    order: Optional[int] = None


class ActionBundle(BaseModel):
    """Capabilities a role holds on a single page.

    ``approval``, ``import`` and ``export`` are carried as-is; only the first
    four flags take part in the cascade rules.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    create: bool = False
    update: bool = False
    delete: bool = False
    view: bool = False
    approval: bool = False
    import_: bool = Field(default=False, alias="import")
    export: bool = False

    @property
    def mutating(self) -> bool:
        return self.create or self.update or self.delete


class PagePermission(BaseModel):
    """A permission entry as persisted for a role."""

    model_config = ConfigDict(frozen=True)

    page_name: str
    actions: ActionBundle = Field(default_factory=ActionBundle)


class PermissionRow(BaseModel):
    """One catalog page joined with its editable action bundle."""

    model_config = ConfigDict(frozen=True)

    page_name: str
    actions: ActionBundle = Field(default_factory=ActionBundle)


class MatrixRow(PermissionRow):
    """A permission row as rendered by the presenter."""

    all_selected: bool
    view_locked: bool


class ToggleEvent(BaseModel):
    action: ToggleAction
    value: bool


class ToggleRequest(ToggleEvent):
    page_name: str = Field(..., min_length=1)
