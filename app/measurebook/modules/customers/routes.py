from __future__ import annotations

from flask import Blueprint, current_app, flash, make_response, redirect, render_template, request, url_for
from markupsafe import Markup

from app.measurebook.modules.customers.controller import CustomerBookController
from app.measurebook.modules.customers.rendering import layout_for_width, render_customer_list, viewport_width
from app.measurebook.modules.customers.service import CustomerRecord, draft_from_form

bp = Blueprint("customers", __name__)


def _controller() -> CustomerBookController:
    return CustomerBookController(current_app.extensions["customer_store"], notify=flash)


def _q() -> str:
    # Search text is matched as typed; no stripping.
    return request.values.get("q") or ""


def _back_to_list():
    return redirect(url_for("customers.index", q=_q() or None))


def _render_screen(ctl: CustomerBookController, *, template: str = "customers/index.html", **ctx):
    width = viewport_width(request.args, request.cookies)
    layout = layout_for_width(width)
    list_html = Markup(render_customer_list(ctl.view_list, layout, q=ctl.state.search_text))
    resp = make_response(
        render_template(
            template,
            state=ctl.state,
            q=ctl.state.search_text,
            layout=layout,
            list_html=list_html,
            **ctx,
        )
    )
    if request.args.get("vw") and width:
        resp.set_cookie("vw", str(width), samesite="Lax")
    return resp


def _load(ctl: CustomerBookController) -> None:
    ctl.set_search(_q())
    ctl.fetch_all()


@bp.get("/")
def index():
    ctl = _controller()
    _load(ctl)
    return _render_screen(ctl)


@bp.get("/customers/list")
def customers_list_fragment():
    """List markup only; the page swaps it in on keystrokes and breakpoint-crossing resizes."""
    # No flash: the page reports the failure itself and keeps its current list.
    ctl = CustomerBookController(current_app.extensions["customer_store"])
    ctl.set_search(_q())
    if not ctl.fetch_all():
        return "Error fetching customers", 503, {"Content-Type": "text/plain; charset=utf-8"}
    layout = layout_for_width(viewport_width(request.args, request.cookies))
    return render_customer_list(ctl.view_list, layout, q=ctl.state.search_text)


@bp.get("/customers/new")
def customers_new():
    ctl = _controller()
    _load(ctl)
    ctl.start_create()
    return _render_screen(ctl)


@bp.get("/customers/<customer_id>")
def customer_detail(customer_id: str):
    ctl = _controller()
    _load(ctl)
    c = ctl.find(customer_id)
    if not c:
        flash("Customer not found.", "danger")
        return _back_to_list()
    ctl.start_view(c)
    return _render_screen(ctl)


@bp.post("/customers/save")
def customers_save():
    ctl = _controller()
    _load(ctl)

    customer_id = (request.form.get("customer_id") or "").strip()
    if customer_id:
        # The list may have failed to load; the store rejects ids that do not exist.
        c = ctl.find(customer_id) or CustomerRecord(id=customer_id, name="", shirt="", pants="", phone="")
        ctl.start_edit(c)
    else:
        ctl.start_create()

    if ctl.save(draft_from_form(request.form), refresh=False):
        return _back_to_list()
    # Failed: keep the modal open with what the user typed.
    return _render_screen(ctl)


@bp.get("/customers/<customer_id>/delete")
def customer_delete_confirm(customer_id: str):
    ctl = _controller()
    _load(ctl)
    c = ctl.find(customer_id)
    if not c:
        flash("Customer not found.", "danger")
        return _back_to_list()
    return _render_screen(ctl, template="customers/confirm_delete.html", customer=c)


@bp.post("/customers/<customer_id>/delete")
def customer_delete_post(customer_id: str):
    ctl = _controller()
    ctl.delete(customer_id, confirm=lambda: request.form.get("confirmed") == "yes", refresh=False)
    return _back_to_list()
