"""Form lifecycle shared by create/edit and delete forms."""

from __future__ import annotations

from typing import Any, Mapping

from markupsafe import Markup

from .actions import css_key
from .fields import FieldStore, Sanitizer
from .hooks import Hooks
from .tokens import token_scope

SUBMIT_FIELD = "submit_action"
SUBMIT_SAVE = "save"
SUBMIT_DELETE = "delete"


class Form:
    method = "POST"
    template: str | None = None

    def __init__(self, action: str, element_id: str | None = None, hooks: Hooks | None = None) -> None:
        self.action = action
        self.id = element_id
        self.hooks = hooks or Hooks()
        self.url = ""
        self.cancel_url = ""
        self.fields = FieldStore()

    def set_url(self, url: str) -> None:
        self.url = url

    def set_cancel_url(self, url: str) -> None:
        self.cancel_url = url

    def set_field(self, name: str, value: Any) -> None:
        self.fields.set(name, value)

    def get_field(self, name: str, default: Any = None) -> Any:
        return self.fields.get(name, default)

    def set_fields(self, values: Mapping[str, Any] | None, clear: bool = False) -> None:
        self.fields.update(values, clear=clear)

    def get_fields(self) -> dict:
        return self.fields.as_dict()

    def register_sanitizer(self, name: str, sanitizer: Sanitizer) -> None:
        self.fields.register_sanitizer(name, sanitizer)

    def sanitize_field_value(self, name: str, value: Any) -> Any:
        return self.fields.sanitize(name, value)

    def add_error(self, name: str, message: str) -> None:
        self.fields.add_error(name, message)

    def get_errors(self) -> dict[str, list[str]]:
        return self.fields.errors()

    def get_field_errors(self, name: str) -> list[str]:
        return self.fields.errors_for(name)

    def has_errors(self) -> bool:
        return self.fields.has_errors()

    def is_valid(self) -> bool:
        self.fields.clear_errors()
        self.validate()
        return not self.has_errors()

    def validate(self) -> None:
        """Record field errors with ``add_error``."""

    def populate(self, item: Any = None) -> None:
        raise NotImplementedError

    def content(self) -> dict:
        """Field values by name, for rendering."""
        return self.get_fields()

    def token_scope(self) -> str:
        return token_scope(self.action, self.get_field("id"))

    def element_id(self) -> str:
        element_id = f"crud-{css_key(self.action)}"
        if self.id:
            element_id += f"-{css_key(self.id)}"
        return element_id

    def css_classes(self) -> list[str]:
        classes = [f"crud-{css_key(self.action)}"]
        if self.id:
            classes.append(f"{classes[0]}-{css_key(self.id)}")
        return list(self.hooks.apply_filters("form_css_classes", classes, self))

    def submit_url(self) -> str:
        return self.hooks.apply_filters("form_url", self.url, self)

    def field_error_html(self, name: str) -> Markup:
        errors = self.get_field_errors(name)
        if not errors:
            return Markup("")
        html = Markup('<div class="crud-field-errors">')
        for message in errors:
            html += Markup('<div class="crud-field-error">{}</div>').format(message)
        return html + Markup("</div>")

    def required_label(self) -> Markup:
        return Markup("<span>*</span>")


class EditForm(Form):
    """Create and edit share this form; ``item_exists`` tells them apart."""

    submit_value = SUBMIT_SAVE
    submit_label = "Save"

    def __init__(self, element_id: str | None = None, hooks: Hooks | None = None) -> None:
        super().__init__("edit", element_id, hooks)

    def item_exists(self) -> bool:
        return self.get_field("id") not in (None, "", 0, False)

    def populate_from_request(self, data: Mapping[str, Any], item: Any = None) -> None:
        """Hydrate fields from submitted input, sanitizing each value."""
        raise NotImplementedError

    def validate(self) -> None:
        raise NotImplementedError


class DeleteForm(Form):
    submit_value = SUBMIT_DELETE
    submit_label = "Delete"

    def __init__(self, element_id: str | None = None, hooks: Hooks | None = None) -> None:
        super().__init__("delete", element_id, hooks)
