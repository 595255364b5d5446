"""The edit widget: a record form with a grid of records to pick from.

Build one with :func:`grid_widget.controller.grid_edit_widget` and set it up
in its configure block::

    def configure(w):
        w.grid_options = {"title": "People", "add_button": True, "del_button": True}
        w.includes = ["category"]
        w.spokesfield = "last_name"
        w.add_column("last_name", sortable=True, open_panel=True)
        w.add_column("category.name", label="Category", custom="custom_abbrev")
        w.add_filter_group("categories", where=lambda ids: {"category_id__in": ids})
        for category in Category.objects.all():
            w.add_filter(category.pk, category.name)

    grid_edit_widget("contacts.Person", configure)

The form is rendered from ``<GRID_WIDGET_FORM_TEMPLATE_DIR>/<form_template>.html``
(falling back to ``default.html``), ``form_template`` defaulting to the
model name.

Edit widgets nest. :meth:`GridEditWidget.embed_widget` puts a dependent
widget (say the contacts of the selected person) into this widget's form;
its ``where`` narrows its records to the selected parent. A widget created
with ``form_only`` has no grid and shows the record that ``form_only`` maps
the parent's record id to, for editing a belongs-to relation alongside its
owner.

Hooks meant to be overridden in the configure block (or a subclass):
``create_attributes``, ``get_form_attributes``, ``after_form_update``,
``before_delete_record`` and the ``*_message``/``*_notice`` builders.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from django.apps import apps
from django.core.exceptions import ImproperlyConfigured
from django.db import models
from django.forms import BaseForm
from django.http import Http404
from django.shortcuts import get_object_or_404
from django.utils.html import format_html
from django.utils.text import capfirst

from grid_widget.conf import settings

from ..config import ConfigMethods
from ..display import CustomDisplayMethods
from ..forms import GridRecordForm, grid_form_class
from ..options import clean_grid_options
from ..services import apply_includes, find_version, latest_version, revert_version
from ..utils import resolve_owner, resolve_path, to_int
from .base import Event, Widget
from .flash import GridFlashWidget
from .filters import GridFiltersWidget
from .list import GridListWidget

logger = logging.getLogger(__name__)

SAVE_COLOR = "#88FF88"
CANCEL_COLOR = "#FF8888"

FORM_BUTTONS = [
    ("submit", "Save+Close", "Add+Close"),
    ("remain", "Save", "Add"),
    ("cancel", "Cancel", "Cancel"),
]
FORM_ONLY_BUTTONS = [
    ("remain", "Save", "Add"),
]


def resolve_model(resource: Any) -> type[models.Model]:
    """``"app_label.ModelName"`` or a model class to the model class."""
    if isinstance(resource, type) and issubclass(resource, models.Model):
        return resource
    try:
        return apps.get_model(str(resource))
    except (LookupError, ValueError) as exc:
        raise ImproperlyConfigured(f"Unknown grid resource '{resource}'") from exc


class GridEditWidget(ConfigMethods, CustomDisplayMethods, Widget):
    template_name = "grid_widget/edit/display.html"

    # settable in the configure block
    dom_id: str
    includes: Any
    form_template: str
    form_fields: Any
    form_class: type[BaseForm]
    multipart_form: bool
    form_buttons: List[Tuple[str, str, str]]
    orphan_template: str
    where: Optional[Callable[[Any], Any]]
    record: models.Model
    human_resource: str
    spokesfield: Optional[str]

    def __init__(self, name: str, resource: Any, **options: Any) -> None:
        self.resource = resource
        super().__init__(name, resource=resource, **options)

    def initialize(self) -> None:
        """Defaults for everything the configure block may change."""
        self.respond_to_event("form_submitted", from_=self.name)
        self.respond_to_event("display_form", from_=self.name)
        self.respond_to_event("revert", from_=self.name)

        model = self.resource_model
        self.where = None
        self.dom_id = self.options.get("dom_id") or self.name
        self.includes = None
        self.grid_options = {}
        self.form_template = model._meta.model_name
        self.form_fields = None
        self.form_class = GridRecordForm
        self.multipart_form = False
        self.orphan_template = "grid_widget/edit/orphan.html"
        # always have a record of some sort
        self.record = model()
        self.human_resource = capfirst(model._meta.verbose_name)
        self.spokesfield = None
        self.reset_config()

        self.flash_widget = f"{self.dom_id}_flash"
        self.add(GridFlashWidget(self.flash_widget))

        if self.form_only:
            self.list_widget = None
            self.filters_widget = None
            self.form_buttons = list(FORM_ONLY_BUTTONS)
        else:
            self.list_widget = f"{self.dom_id}_list"
            self.filters_widget = f"{self.dom_id}_filters"
            list_widget = self.add(GridListWidget(self.list_widget))
            list_widget.add(GridFiltersWidget(self.filters_widget))
            self.form_buttons = list(FORM_BUTTONS)

    # ----- configuration --------------------------------------------------------
    @property
    def grid_options(self) -> Dict[str, Any]:
        return self._grid_options

    @grid_options.setter
    def grid_options(self, value: Optional[Mapping[str, Any]]) -> None:
        self._grid_options = clean_grid_options(value)

    @property
    def form_only(self) -> Optional[Callable[[Any], Any]]:
        return self.options.get("form_only")

    @property
    def resource_model(self) -> type[models.Model]:
        return resolve_model(self.resource)

    @property
    def caption(self) -> str:
        """The grid title. Override for a caption that changes."""
        return self.grid_options.get("title") or capfirst(self.resource_model._meta.verbose_name_plural)

    @property
    def form_id(self) -> str:
        return f"{self.dom_id}_form"

    def record_name(self, record: Optional[models.Model] = None) -> str:
        record = self.record if record is None else record
        if self.spokesfield:
            return str(resolve_path(record, self.spokesfield))
        return f"{self.human_resource} {record.pk}"

    # ----- records ----------------------------------------------------------------
    def set_record(self, id: Any = None, pid: Any = None) -> models.Model:
        """Load the record with ``id``, or start a new one.

        A new record of a dependent widget is seeded from ``where(pid)``.
        """
        pk = to_int(id)
        if pk > 0:
            qs = apply_includes(self.resource_model._default_manager.all(), self.includes)
            self.record = get_object_or_404(qs, pk=pk)
        else:
            attributes: Dict[str, Any] = {}
            if pid not in (None, "") and self.where is not None:
                scope = self.where(pid)
                if isinstance(scope, Mapping):
                    attributes.update(scope)
            attributes.update(self.create_attributes())
            self.record = self.resource_model(**attributes)
        return self.record

    def create_attributes(self) -> Dict[str, Any]:
        """Values stuffed into every new record."""
        return {}

    # ----- display ----------------------------------------------------------------
    def display(self, evt: Optional[Event] = None) -> str:
        parent_record = getattr(self.parent, "record", None)
        parent_pk = getattr(parent_record, "pk", None)
        if self.form_only:
            self.set_record(self.form_only(parent_pk) if parent_pk else None)
            return self.render(
                "grid_widget/edit/form_only.html",
                container=self.form_id,
                flash_html=self.invoke_child(self.flash_widget),
                form_html=self.form_content(),
            )
        # a dependent widget needs a selected parent record
        if self.where is not None and not parent_pk:
            return self.render(self.orphan_template)
        return self.render(
            list_html=self.invoke_child(self.list_widget),
            flash_html=self.invoke_child(self.flash_widget),
            container=self.form_id,
        )

    def invoke_child(self, name: Optional[str], state: str = "display") -> str:
        child = self.find_widget(name) if name else None
        return child.invoke(state) if child is not None else ""

    def form_template_names(self) -> List[str]:
        base = settings.GRID_WIDGET_FORM_TEMPLATE_DIR
        return [f"{base}/{self.form_template}.html", f"{base}/default.html"]

    def get_form(self, data=None, files=None) -> BaseForm:
        form_class = grid_form_class(self.resource_model, fields=self.form_fields, form=self.form_class)
        return form_class(data=data, files=files, instance=self.record, prefix=self.form_id)

    def get_buttons(self) -> List[Tuple[str, str]]:
        adding = self.record.pk is None
        return [(action, add_label if adding else edit_label) for action, edit_label, add_label in self.form_buttons]

    def form_content(self, pid: Any = None, form: Optional[BaseForm] = None) -> str:
        """The form, wrapped in the markup that submits it back to this widget."""
        form = form if form is not None else self.get_form()
        form_body = self.render(self.form_template_names(), form=form, record=self.record, pid=pid)
        return self.render(
            "grid_widget/edit/form_wrapper.html",
            container=self.form_id,
            record=self.record,
            pid=pid,
            form=form,
            form_body=form_body,
            buttons=self.get_buttons(),
            multipart_form=self.multipart_form,
        )

    def display_form(self, evt: Optional[Event] = None) -> str:
        """Fill the form container with the record's form and reveal it."""
        pid = evt.get("pid") if evt else None
        self.set_record(evt.get("id") if evt else None, pid)
        return self.update(f"#{self.form_id}", self.form_content(pid)) + self.render(
            "grid_widget/edit/form_reveal.js", form=self.form_id
        )

    def form_pulse(self, color: str = SAVE_COLOR) -> str:
        """JS flashing the form's background (signals a save)."""
        return self.render("grid_widget/edit/form_pulse.js", form=self.form_id, color=color)

    def form_deveal(self, color: str = SAVE_COLOR) -> str:
        """JS tinting the form and sliding it away; red signals a cancel."""
        return self.render("grid_widget/edit/form_deveal.js", form=self.form_id, color=color)

    # ----- form submission ----------------------------------------------------------
    def get_form_attributes(self, evt: Event) -> Tuple[Any, Dict[str, Any]]:
        """Split the submission into form data and the ``<form_id>_special`` extras.

        The extras are entries with no model field (a checkbox triggering
        some action, say) and are handed to :meth:`after_form_update`.
        """
        prefix = f"{self.form_id}_special-"
        special = {key[len(prefix):]: evt.data.get(key) for key in evt.data if key.startswith(prefix)}
        return evt.data, special

    def form_submitted(self, evt: Event) -> str:
        form_action = evt.get("form_action")
        if form_action == "cancel":
            self.trigger("flash_deveal")
            return self.form_deveal(CANCEL_COLOR)

        pid = evt.get("pid")
        attributes, special = self.get_form_attributes(evt)
        self.set_record(evt.get("id"), pid)
        was_new = self.record.pk is None
        form = self.get_form(data=attributes, files=evt.files)
        if not form.is_valid():
            logger.debug("%s form errors: %s", self.name, form.errors.as_json())
            self.trigger("flash", alert=self.invalid_message(form))
            return self.update(f"#{self.form_id}", self.form_content(pid, form=form)) + self.form_pulse(CANCEL_COLOR)

        was_dirty = was_new or form.has_changed()
        self.record = form.save()
        logger.info("%s %s %s", self.name, "created" if was_new else "updated", self.record.pk)
        reaction = self.after_form_update(
            record=self.record,
            was_new=was_new,
            form_action=form_action,
            special=special,
            was_dirty=was_dirty,
            pid=pid,
        )
        self.trigger("flash", notice=reaction["notice"])
        if reaction.get("display_form"):
            self.trigger("display_form", **reaction["display_form"])
        self.trigger("reload_grid")
        return reaction["text"]

    def after_form_update(
        self,
        record: models.Model,
        was_new: bool,
        form_action: Optional[str],
        special: Optional[Mapping[str, Any]] = None,
        was_dirty: bool = True,
        pid: Any = None,
        reaction: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """React to a saved record, e.g. to add child records once it has an id.

        Returns a dict with ``text`` (the JS to send back) and ``notice``. A
        ``display_form`` entry (``{"id": ..., "pid": ...}``) triggers
        ``display_form`` with it.
        """
        reaction = dict(reaction or {})
        if self.form_only or form_action == "remain":
            text = self.form_pulse()
            if was_new and not self.form_only:
                # keep editing the record just added rather than adding another
                text = self.update(f"#{self.form_id}", self.form_content(pid)) + text
            reaction["text"] = text
        else:
            reaction["text"] = self.form_deveal()
        reaction.setdefault("notice", self.update_notice(record, was_new, was_dirty))
        return reaction

    def update_message(self, record: models.Model, was_new: bool, was_dirty: bool) -> str:
        if not was_dirty:
            return f"{self.record_name(record)} unchanged."
        return f"{self.record_name(record)} {'added' if was_new else 'updated'}."

    def update_notice(self, record: models.Model, was_new: bool, was_dirty: bool) -> str:
        link = self.undo_update_link(record) if was_dirty else None
        return self.with_link(self.update_message(record, was_new, was_dirty), link)

    def invalid_message(self, form: BaseForm) -> str:
        return f"{self.human_resource} not saved, please correct the errors below."

    # ----- deletion -------------------------------------------------------------------
    def delete_record(self, evt: Optional[Event] = None) -> str:
        """Delete the selected record, then close the form and redraw the grid."""
        record = self.set_record(evt.get("id") if evt else None)
        if record.pk is not None and self.before_delete_record(record):
            pk = record.pk
            record.delete()
            logger.info("%s deleted %s", self.name, pk)
            # delete() clears the pk; the notice still names the record by it
            record.pk = pk
            self.trigger("flash", notice=self.delete_notice(record))
        self.trigger("reload_grid")
        return self.form_deveal(CANCEL_COLOR)

    def before_delete_record(self, record: models.Model) -> bool:
        """Return something false to abort the deletion."""
        return True

    def delete_message(self, record: models.Model) -> str:
        return f"{self.record_name(record)} deleted."

    def delete_notice(self, record: models.Model) -> str:
        return self.with_link(self.delete_message(record), self.undo_update_link(record))

    # ----- in-place editing -------------------------------------------------------------
    def inplace_edit(self, evt: Optional[Event] = None) -> str:
        """Edit the clicked cell in place; only toggling booleans is supported.

        The form is closed since it may have been showing the same record.
        """
        col = to_int(evt.get("col") if evt else None, -1)
        if not 0 <= col < len(self.columns) or not self.columns[col].inplace_edit:
            return ""
        column = self.columns[col]
        self.set_record(evt.get("id"))
        if column.toggle:
            owner, attr = resolve_owner(self.record, column.field)
            if owner is None:
                # nothing to toggle through an empty relation
                return ""
            value = not getattr(owner, attr)
            setattr(owner, attr, value)
            owner.save(update_fields=[attr])
            logger.info("%s toggled %s of %s to %s", self.name, column.field, self.record.pk, value)
            self.trigger("flash", notice=self.inplace_notice(column, value, self.record, owner))
        self.trigger("reload_grid")
        return self.form_deveal(CANCEL_COLOR)

    def inplace_message(self, column, new_value: bool, record: models.Model) -> str:
        return f"{column.label} {'' if new_value else 'un'}checked for {self.record_name(record)}."

    def inplace_notice(
        self, column, new_value: bool, record: models.Model, owner: Optional[models.Model] = None
    ) -> str:
        # the undo link reverts whichever object the toggle saved
        link = self.undo_update_link(owner if owner is not None else record)
        return self.with_link(self.inplace_message(column, new_value, record), link)

    # ----- undo / redo ------------------------------------------------------------------
    def with_link(self, message: str, link: Optional[str]) -> str:
        return format_html("{} [{}]", message, link) if link else message

    def revert_link(self, version, link_text: str, redo: bool = False) -> str:
        """Link posting a ``revert`` event for ``version`` from the flash box."""
        return format_html(
            '<a href="#" class="grid_widget_revert" data-url="{}" data-model="{}" data-id="{}" data-redo="{}">{}</a>',
            self.url_for_event("revert"),
            version.instance_type._meta.label_lower,
            version.history_id,
            "true" if redo else "false",
            link_text,
        )

    def undo_update_link(self, record: models.Model, link_text: str = "Undo") -> Optional[str]:
        """Link undoing the last change to ``record``; ``None`` when its model keeps no history."""
        version = latest_version(type(record), record.pk)
        return self.revert_link(version, link_text) if version is not None else None

    def undo_redo_link(
        self, record: models.Model, is_redo: bool = False, undo_text: str = "Undo", redo_text: str = "Redo"
    ) -> Optional[str]:
        """Link taking back the revert just done: a redo after an undo, an undo after a redo."""
        version = latest_version(type(record), record.pk)
        if version is None:
            return None
        return self.revert_link(version, undo_text if is_redo else redo_text, redo=not is_redo)

    def revert(self, evt: Optional[Event] = None) -> str:
        """Undo (or redo) the change recorded by historical record ``evt.id``.

        ``evt.model`` names the model the change was recorded for: the
        resource, or the related model a toggle column saved.
        """
        history_id = to_int(evt.get("id") if evt else None)
        model = self.revertable_models().get(evt.get("model") if evt else None)
        version = find_version(model, history_id) if model is not None else None
        if version is None:
            raise Http404(f"No change {history_id} to revert")
        record = revert_version(version)
        is_redo = evt.get("redo") == "true"
        self.trigger("flash", notice=self.undo_notice(is_redo, record))
        self.trigger("reload_grid")
        return ""

    def revertable_models(self) -> Dict[str, type[models.Model]]:
        found = [self.resource_model]
        for column in self.columns:
            if column.toggle and "." in column.field:
                related = self.resource_model
                for part in column.field.split(".")[:-1]:
                    related = related._meta.get_field(part).related_model
                found.append(related)
        return {model._meta.label_lower: model for model in found}

    def undo_message(self, is_redo: bool, record: models.Model) -> str:
        return f"Last change {'re' if is_redo else 'un'}done for {self.record_name(record)}."

    def undo_notice(self, is_redo: bool, record: models.Model) -> str:
        return self.with_link(self.undo_message(is_redo, record), self.undo_redo_link(record, is_redo))

    # ----- nesting ----------------------------------------------------------------------
    def embed_widget(self, where: Optional[Callable[[Any], Any]], widget: "GridEditWidget") -> "GridEditWidget":
        """Put a subordinate edit widget into this widget's form.

        ``where`` maps this widget's record id to the child's scope, e.g.
        ``lambda pid: {"person_id": pid}``; pass ``None`` for a ``form_only``
        child. Place it in the form template with ``{% render_widget "<name>" %}``.
        """
        self.add(widget)
        widget.where = where
        if self.list_widget:
            self.respond_to_event("reload_grid", from_=widget.name, with_="reload_grid", on=self.list_widget)
        self.respond_to_event("display_form", from_=widget.name, with_="display_form", on=self.name)
        return widget
