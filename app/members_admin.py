"""Member administration CRUD page."""

from __future__ import annotations

import logging
import os
from typing import Any, Mapping

from markupsafe import Markup

from crudpage.actions import PageAction, RowAction
from crudpage.forms import DeleteForm, EditForm
from crudpage.hooks import Hooks
from crudpage.list_table import Column, ListTable, Row
from crudpage.page import CrudContext, CrudPage

from app.stores import MemoryMemberStore

PAGE_ID = "member_admin"

_logger = logging.getLogger("crudpage.members")

_HEADER_TITLES = {
    "create": "Add Member",
    "edit": "Edit Member",
    "delete": "Delete Member",
}


def _clean_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


class MemberViewRowAction(RowAction):
    """Links to the member's public profile, when a profile URL is configured."""

    def __init__(self) -> None:
        super().__init__("view", "View")

    def get_url(self, table: "MemberListTable", row: Row) -> str:
        url = ""
        member = self._member_for_row(table, row)
        profile_url = os.getenv("CRUD_MEMBER_PROFILE_URL", "").strip()
        if member and profile_url:
            url = profile_url.format(id=member["id"], name=member.get("name") or "")
        return table.hooks.apply_filters("row_action_url", url, self, table, row)

    def _member_for_row(self, table: "MemberListTable", row: Row) -> dict | None:
        member = row.get_meta("member")
        if member:
            return member
        member_id = row.get_column("id")
        if not member_id:
            return None
        return table.store.get(member_id)


class MemberListTable(ListTable):
    def __init__(self, store: MemoryMemberStore, hooks: Hooks | None = None) -> None:
        super().__init__(hooks)
        self.store = store
        self.row_actions.append(MemberViewRowAction())

    def prepare(self, page: int, per_page: int) -> None:
        offset = (page - 1) * per_page
        self.total_items = self.store.count()
        self.rows = [
            Row({"id": member["id"], "name": member.get("name", "")}, {"member": member})
            for member in self.store.list_page(offset=offset, limit=per_page)
        ]


class MemberEditForm(EditForm):
    template = "members/admin/form-edit.html"

    def __init__(self, hooks: Hooks | None = None) -> None:
        super().__init__("member", hooks)
        self.register_sanitizer("name", _clean_text)

    def populate_from_request(self, data: Mapping[str, Any], item: Any = None) -> None:
        if item:
            self.set_field("id", item["id"])
        self.set_fields({"name": self.sanitize_field_value("name", data.get("field_name"))})

    def populate(self, item: Any = None) -> None:
        if not item:
            return
        self.set_fields({"id": item["id"], "name": item.get("name", "")})

    def validate(self) -> None:
        self.validate_name_field()

    def validate_name_field(self) -> None:
        if not self.get_field("name"):
            self.add_error("name", "Name is required")


class MemberDeleteForm(DeleteForm):
    template = "members/admin/form-delete.html"

    def __init__(self, hooks: Hooks | None = None) -> None:
        super().__init__("member", hooks)

    def populate(self, item: Any = None) -> None:
        if not item:
            return
        self.set_fields({"id": item["id"], "name": item.get("name", "")})


class MemberAdminPage(CrudPage):
    template_dir = "members/admin/"

    def __init__(self, store: MemoryMemberStore | None = None, **kwargs: Any) -> None:
        self.store = store or MemoryMemberStore()
        super().__init__(
            PAGE_ID,
            "Member Administration",
            "Page for administrators to manage members.",
            **kwargs,
        )
        self.page_actions.append(PageAction("create", "Create"))
        self.hooks.add_filter("before_content", self.page_header)

    def build_list_table(self, ctx: CrudContext) -> MemberListTable:
        table = MemberListTable(self.store, hooks=self.hooks)
        table.set_base_url(self.url)
        table.add_column(Column("id", "ID"))
        table.add_column(Column("name", "Name"))
        return table

    def build_edit_form(self, ctx: CrudContext) -> MemberEditForm:
        form = MemberEditForm(hooks=self.hooks)
        form.set_cancel_url(self.url)
        return form

    def build_delete_form(self, ctx: CrudContext) -> MemberDeleteForm:
        form = MemberDeleteForm(hooks=self.hooks)
        form.set_cancel_url(self.url)
        return form

    def page_header(self, fragments: list, action: str | None, ctx: CrudContext) -> list:
        title = _HEADER_TITLES.get(action or "")
        if not title:
            return fragments
        return fragments + [Markup('<h2 class="crud-page-action-title">{}</h2>').format(title)]

    def check_permissions(self, ctx: CrudContext) -> bool:
        return ctx.user_id is not None

    def user_can_edit_item(self, ctx: CrudContext, item_id: Any, user_id: str | None = None) -> bool:
        return bool(user_id or ctx.user_id)

    def is_valid_item_id(self, ctx: CrudContext, item_id: Any) -> bool:
        return ctx.get_current_edit_item() is not None

    def get_item(self, item_id: Any) -> dict | None:
        return self.store.get(item_id)

    def create_item(self, ctx: CrudContext, fields: dict) -> bool:
        member = self.store.create({"name": fields.get("name", "")})
        _logger.info("member_created id=%s user=%s", member["id"], ctx.user_id)
        return True

    def update_item(self, ctx: CrudContext, item_id: Any, fields: dict) -> bool:
        member = self.store.update(item_id, {"name": fields.get("name", "")})
        return member is not None

    def delete_item(self, ctx: CrudContext, item_id: Any) -> bool:
        deleted = self.store.delete(item_id)
        if deleted:
            _logger.info("member_deleted id=%s user=%s", item_id, ctx.user_id)
        return deleted
