"""CRUD page action router.

A ``CrudPage`` is built once at start-up and shared by all requests. Everything
that belongs to one request (resolved action, item id, loaded item, message,
forms, list table) lives on the ``CrudContext`` created for that request.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Tuple

from markupsafe import Markup

from .actions import PageAction
from .content_page import ContentPage
from .flash import ERROR, SUCCESS, FlashMessage, FlashTransport, MemoryFlashTransport
from .forms import SUBMIT_DELETE, SUBMIT_FIELD, DeleteForm, EditForm, Form
from .hooks import Hooks
from .list_table import ListTable
from .pagination import DEFAULT_MAX_PER_PAGE, DEFAULT_PER_PAGE, Pagination, parse_pagination
from .render import TemplateRenderer
from .request import PageRequest, Redirect, add_query_args
from .tokens import TOKEN_FIELD, TokenSigner, token_scope

_logger = logging.getLogger("crudpage.page")
_UNSET: Any = object()

Handler = Callable[["CrudContext"], None]


@dataclass
class ActionSpec:
    methods: Tuple[str, ...]
    screen: Handler | None = None
    prepare: Handler | None = None


class CrudContext:
    """Request-scoped state of one CRUD page request."""

    def __init__(self, page: "CrudPage", request: PageRequest, content_page: ContentPage | None = None) -> None:
        self.page = page
        self.request = request
        self.content_page = content_page
        self.message: FlashMessage | None = None
        self.template_data: Dict[str, Any] = {}
        self.redirect_url: str | None = None
        self._action: Any = _UNSET
        self._item_id: Any = _UNSET
        self._edit_item: Any = _UNSET
        self.page_num, self.per_page = parse_pagination(request.query, page.per_page, page.max_per_page)
        self.list_table: ListTable | None = page.build_list_table(self)
        self.edit_form: EditForm | None = page.build_edit_form(self)
        self.delete_form: DeleteForm | None = page.build_delete_form(self)
        if self.list_table is not None:
            self.list_table.return_to_url = request.url or page.url

    @property
    def action(self) -> str | None:
        if self._action is _UNSET:
            self._action = self.page.resolve_action(self.request)
        return self._action

    @property
    def item_id(self) -> str | None:
        if self._item_id is _UNSET:
            self._item_id = self.page.resolve_item_id(self.request)
        return self._item_id

    @property
    def user(self) -> dict | None:
        return self.request.user

    @property
    def user_id(self) -> str | None:
        return self.request.user_id

    @property
    def url(self) -> str:
        return self.page.url

    @property
    def page_actions(self) -> list[PageAction]:
        return list(self.page.page_actions)

    @property
    def pagination(self) -> Pagination:
        total = self.list_table.get_total_items() if self.list_table is not None else 0
        return Pagination(self.page_num, self.per_page, total, self.page.url)

    def get_current_edit_item(self) -> Any:
        """The item named by the request, looked up at most once; ``None`` if missing."""
        if self._edit_item is _UNSET:
            item_id = self.item_id
            if not item_id:
                return None
            self._edit_item = self.page.lookup_item(item_id)
        return self._edit_item

    def set(self, key: str, value: Any) -> None:
        self.template_data[key] = value

    def set_message(self, text: str, kind: str = SUCCESS) -> None:
        self.message = FlashMessage(kind=kind, text=text)

    def message_html(self) -> Markup:
        if not self.message:
            return Markup("")
        return Markup('<div class="crud-message crud-message-{}">{}</div>').format(
            self.message.kind,
            self.message.text,
        )

    def token(self, form: Form) -> str:
        return self.page.tokens.create(form.token_scope(), self.user_id)

    def token_field(self, form: Form) -> Markup:
        return Markup('<input type="hidden" name="{}" value="{}" />').format(TOKEN_FIELD, self.token(form))

    def before_content(self) -> list[Markup]:
        fragments = self.page.hooks.apply_filters("before_content", [], self.action, self)
        return [Markup(fragment) for fragment in fragments]


class CrudPage:
    default_action = "list"
    template_dir = ""
    per_page = DEFAULT_PER_PAGE
    max_per_page = DEFAULT_MAX_PER_PAGE
    messages: Mapping[str, str] = {
        "no_permission": "Sorry, you do not have permission to perform the action.",
        "not_found": "The requested item could not be found.",
        "created": "Item created.",
        "updated": "Item updated.",
        "deleted": "Item deleted.",
        "create_failed": "Sorry, there was an error saving the item.",
        "update_failed": "Sorry, there was an error updating the item.",
        "delete_failed": "Sorry, the item could not be deleted.",
    }

    def __init__(
        self,
        page_id: str,
        label: str,
        description: str = "",
        *,
        registry: Any = None,
        path: str | None = None,
        url: str = "",
        tokens: TokenSigner | None = None,
        flash: FlashTransport | None = None,
        renderer: TemplateRenderer | None = None,
        hooks: Hooks | None = None,
    ) -> None:
        self.id = page_id
        self.label = label
        self.description = description
        self.hooks = hooks or Hooks()
        self.tokens = tokens or TokenSigner()
        self.flash = flash or MemoryFlashTransport()
        self.renderer = renderer or TemplateRenderer()
        self.page_actions: List[PageAction] = []
        self._actions: Dict[str, ActionSpec] = {}

        self.register_action("list", ("GET",), prepare=self.prepare_list)
        self.register_action("create", ("GET", "POST"), screen=self.screen_create)
        self.register_action("edit", ("GET", "POST"), screen=self.screen_edit)
        self.register_action("delete", ("GET", "POST"), screen=self.screen_delete)

        self.content_page = ContentPage(
            id=page_id,
            label=label,
            description=description,
            display_callback=lambda _page, ctx: self.display(ctx),
            screen_callback=lambda _page, ctx: self.screen(ctx),
            data_callback=lambda _page, ctx: self.get_data(ctx),
            permission_callback=lambda _page, ctx: self.check_permissions(ctx),
            context_callback=lambda page, request: self.new_context(request, page),
            no_permission_callback=lambda _page, ctx: self.no_permission(ctx),
        )
        self.url = url
        if registry is not None:
            registry.register_page(self.content_page, path=path)
            self.url = registry.get_url(self.content_page)

    # -- setup ---------------------------------------------------------------

    def register_action(
        self,
        name: str,
        methods: Tuple[str, ...] | List[str],
        screen: Handler | None = None,
        prepare: Handler | None = None,
    ) -> None:
        self._actions[name] = ActionSpec(
            methods=tuple(method.upper() for method in methods),
            screen=screen,
            prepare=prepare,
        )

    def new_context(self, request: PageRequest, content_page: ContentPage | None = None) -> CrudContext:
        return CrudContext(self, request, content_page or self.content_page)

    def build_list_table(self, ctx: CrudContext) -> ListTable | None:
        return None

    def build_edit_form(self, ctx: CrudContext) -> EditForm | None:
        return None

    def build_delete_form(self, ctx: CrudContext) -> DeleteForm | None:
        return None

    def build_url(self, query_args: Mapping[str, Any] | None = None) -> str:
        if not query_args:
            return self.url
        return add_query_args(self.url, query_args)

    # -- request resolution --------------------------------------------------

    def is_valid_action(self, action: str, method: str = "GET") -> bool:
        spec = self._actions.get(action)
        if spec is None:
            return False
        return method.upper() in spec.methods

    def resolve_action(self, request: PageRequest) -> str | None:
        if request.is_post:
            action = request.form.get("action")
            if action and self.is_valid_action(action, "POST"):
                return action
        action = request.query.get("action")
        if action and self.is_valid_action(action, request.method):
            return action
        if request.is_get:
            return self.default_action
        return None

    def resolve_item_id(self, request: PageRequest) -> str | None:
        item_id = request.form.get("id")
        if item_id in (None, ""):
            item_id = request.query.get("id")
        if item_id in (None, ""):
            return None
        return item_id

    # -- screen --------------------------------------------------------------

    def screen(self, ctx: CrudContext) -> None:
        """Run the current action's flow; may raise ``Redirect``."""
        self.setup_message(ctx)
        action = ctx.action
        if not action:
            return
        spec = self._actions.get(action)
        if spec is not None and spec.screen is not None:
            spec.screen(ctx)

    def setup_message(self, ctx: CrudContext) -> None:
        flashed = self.flash.read_and_clear(ctx.request)
        if ctx.message is None:
            ctx.message = flashed

    def screen_create(self, ctx: CrudContext) -> None:
        form = ctx.edit_form
        if form is None:
            return

        if ctx.request.is_post:
            self.verify_action_token(ctx, "create")
            form.populate_from_request(ctx.request.form)
            if not form.is_valid():
                _logger.info("crud_form_invalid page=%s action=create fields=%s", self.id, sorted(form.get_errors()))
                return
            if not self._call_mutation(ctx, "create", self.create_item, ctx, form.get_fields()):
                ctx.set_message(self.messages["create_failed"], ERROR)
                return
            self.item_created_redirect(ctx)

        form.populate()

    def screen_edit(self, ctx: CrudContext) -> None:
        item_id = ctx.item_id
        form = ctx.edit_form
        if not item_id or form is None:
            return

        self._check_item_access(ctx, item_id)
        item = ctx.get_current_edit_item()

        if ctx.request.is_post:
            self.verify_action_token(ctx, "edit", item_id)
            form.populate_from_request(ctx.request.form, item)
            if not form.is_valid():
                _logger.info("crud_form_invalid page=%s action=edit item_id=%s fields=%s", self.id, item_id, sorted(form.get_errors()))
                return
            if not self._call_mutation(ctx, "update", self.update_item, ctx, item_id, form.get_fields()):
                ctx.set_message(self.messages["update_failed"], ERROR)
                return
            self.item_updated_redirect(ctx)

        form.populate(item)

    def screen_delete(self, ctx: CrudContext) -> None:
        item_id = ctx.item_id
        form = ctx.delete_form
        if not item_id or form is None:
            return

        self._check_item_access(ctx, item_id)
        item = ctx.get_current_edit_item()
        form.populate(item)

        if not ctx.request.is_post:
            return

        self.verify_action_token(ctx, "delete", item_id)
        if ctx.request.form.get(SUBMIT_FIELD) != SUBMIT_DELETE:
            return
        if not self._call_mutation(ctx, "delete", self.delete_item, ctx, item_id):
            ctx.set_message(self.messages["delete_failed"], ERROR)
            return
        self.item_deleted_redirect(ctx)

    def verify_action_token(self, ctx: CrudContext, action: str, item_id: Any = None) -> None:
        token = ctx.request.form.get(TOKEN_FIELD)
        user_id = ctx.user_id
        if self.tokens.verify(token, token_scope(action, item_id), user_id):
            return
        # Create and edit render the same form, so a create submission may carry the edit scope.
        if not item_id and self.tokens.verify(token, token_scope("edit"), user_id):
            return
        _logger.warning("crud_token_invalid page=%s action=%s item_id=%s user=%s", self.id, action, item_id, user_id)
        self.no_permission_redirect(ctx)

    def _check_item_access(self, ctx: CrudContext, item_id: Any) -> None:
        if not self._call_check("is_valid_item_id", self.is_valid_item_id, ctx, item_id):
            self.not_found_redirect(ctx)
        if not self._call_check("user_can_edit_item", self.user_can_edit_item, ctx, item_id, ctx.user_id):
            self.no_permission_redirect(ctx)

    def _call_check(self, name: str, check: Callable[..., bool], *args: Any) -> bool:
        try:
            return bool(check(*args))
        except Redirect:
            raise
        except Exception:
            _logger.exception("crud_check_failed page=%s check=%s", self.id, name)
            return False

    def _call_mutation(self, ctx: CrudContext, operation: str, mutate: Callable[..., bool], *args: Any) -> bool:
        try:
            ok = bool(mutate(*args))
        except Redirect:
            raise
        except Exception:
            _logger.exception("crud_item_%s_error page=%s item_id=%s", operation, self.id, ctx.item_id)
            return False
        if not ok:
            _logger.warning("crud_item_%s_failed page=%s item_id=%s", operation, self.id, ctx.item_id)
        return ok

    def lookup_item(self, item_id: Any) -> Any:
        try:
            return self.get_item(item_id)
        except Exception:
            _logger.exception("crud_item_lookup_error page=%s item_id=%s", self.id, item_id)
            return None

    # -- redirects -----------------------------------------------------------

    def message_redirect(self, ctx: CrudContext, text: str, kind: str = SUCCESS, url: str = "") -> None:
        message = FlashMessage(kind=kind, text=text)
        ctx.message = message
        self.flash.write(ctx.request, message)
        target = url or self.build_url()
        ctx.redirect_url = target
        _logger.info("crud_redirect page=%s action=%s kind=%s url=%s", self.id, ctx.action, kind, target)
        raise Redirect(target)

    def no_permission_redirect(self, ctx: CrudContext, url: str = "") -> None:
        self.message_redirect(ctx, self.messages["no_permission"], ERROR, url)

    def not_found_redirect(self, ctx: CrudContext, url: str = "") -> None:
        self.message_redirect(ctx, self.messages["not_found"], ERROR, url)

    def item_created_redirect(self, ctx: CrudContext, url: str = "") -> None:
        self.message_redirect(ctx, self.messages["created"], SUCCESS, url)

    def item_updated_redirect(self, ctx: CrudContext, url: str = "") -> None:
        self.message_redirect(ctx, self.messages["updated"], SUCCESS, url)

    def item_deleted_redirect(self, ctx: CrudContext, url: str = "") -> None:
        self.message_redirect(ctx, self.messages["deleted"], SUCCESS, url)

    # -- rendering -----------------------------------------------------------

    def prepare_list(self, ctx: CrudContext) -> None:
        if ctx.list_table is not None:
            ctx.list_table.prepare(ctx.page_num, ctx.per_page)

    def get_data(self, ctx: CrudContext) -> dict:
        action = ctx.action
        spec = self._actions.get(action) if action else None
        if spec is not None and spec.prepare is not None:
            spec.prepare(ctx)
        data = dict(ctx.template_data)
        data["crud"] = ctx
        return data

    def display(self, ctx: CrudContext) -> str:
        action = ctx.action
        if not action:
            return ""
        return self.renderer.render(action, self.get_data(ctx), self.template_dir)

    def no_permission(self, ctx: CrudContext) -> str:
        return self.renderer.render("no_permission", {"crud": ctx}, self.template_dir)

    # -- collaborators -------------------------------------------------------

    def check_permissions(self, ctx: CrudContext) -> bool:
        return False

    def user_can_edit_item(self, ctx: CrudContext, item_id: Any, user_id: str | None = None) -> bool:
        return False

    def is_valid_item_id(self, ctx: CrudContext, item_id: Any) -> bool:
        return False

    def get_item(self, item_id: Any) -> Any:
        raise NotImplementedError

    def create_item(self, ctx: CrudContext, fields: dict) -> bool:
        raise NotImplementedError

    def update_item(self, ctx: CrudContext, item_id: Any, fields: dict) -> bool:
        raise NotImplementedError

    def delete_item(self, ctx: CrudContext, item_id: Any) -> bool:
        raise NotImplementedError
