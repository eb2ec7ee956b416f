"""Form definition input model.

Quick usage::

    from formgen.forms import FormDefinition

    definition = FormDefinition.from_json(Path("form.json").read_text())
    email = definition.get_field("Email")
"""

from formgen.forms.models import FormDefinition, FormField

__all__ = [
    "FormDefinition",
    "FormField",
]
