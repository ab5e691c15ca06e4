"""CRUD page kernel: action routing, forms, list tables and flash messages."""

from .actions import DeleteRowAction, EditRowAction, PageAction, RowAction
from .content_page import ContentPage
from .fields import FieldStore
from .flash import ERROR, INFO, SUCCESS, FlashMessage, FlashTransport, MemoryFlashTransport
from .forms import DeleteForm, EditForm, Form
from .hooks import Hooks
from .list_table import Column, ListTable, Row
from .page import CrudContext, CrudPage
from .pagination import Pagination, parse_pagination
from .render import TemplateRenderer
from .request import CrudError, PageRequest, Redirect, ResponseCookies, add_query_args
from .tokens import TOKEN_FIELD, TokenError, TokenSigner, token_scope

__all__ = [
    "Column",
    "ContentPage",
    "CrudContext",
    "CrudError",
    "CrudPage",
    "DeleteForm",
    "DeleteRowAction",
    "EditForm",
    "EditRowAction",
    "ERROR",
    "FieldStore",
    "FlashMessage",
    "FlashTransport",
    "Form",
    "Hooks",
    "INFO",
    "ListTable",
    "MemoryFlashTransport",
    "PageAction",
    "PageRequest",
    "Pagination",
    "Redirect",
    "ResponseCookies",
    "Row",
    "RowAction",
    "SUCCESS",
    "TemplateRenderer",
    "TOKEN_FIELD",
    "TokenError",
    "TokenSigner",
    "add_query_args",
    "parse_pagination",
    "token_scope",
]
