from django import forms
from django.forms import modelform_factory
from crispy_forms.helper import FormHelper


class GridRecordForm(forms.ModelForm):
    """Base form of an edit widget's record.

    The edit widget supplies the surrounding form markup, CSRF token and
    buttons, so crispy renders the fields only.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        for field in self.fields.values():
            widget = field.widget
            if isinstance(widget, (forms.CheckboxInput, forms.CheckboxSelectMultiple, forms.RadioSelect)):
                continue
            css = "form-select" if isinstance(widget, forms.Select) else "form-control"
            widget.attrs.setdefault("class", css)
        self.helper = FormHelper()
        self.helper.form_tag = False  # the wrapper template posts the fields
        self.helper.disable_csrf = True


def grid_form_class(model, fields=None, form=GridRecordForm):
    """ModelForm class for ``model``; all fields unless the form or ``fields`` say otherwise."""
    meta = getattr(form, "Meta", None)
    if fields is None and not (getattr(meta, "fields", None) or getattr(meta, "exclude", None)):
        fields = "__all__"
    return modelform_factory(model, form=form, fields=fields)
