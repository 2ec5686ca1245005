from typing import Any

from wtforms import Form, IntegerField, SelectField, StringField, TextAreaField, URLField
from wtforms.validators import DataRequired, NumberRange, Optional, URL

from specieshub.species.models import MAX_POPULATION, Kingdom, SpeciesValues


def strip_whitespace(value: Any) -> Any:
    """Trim surrounding whitespace from string input."""
    return value.strip() if isinstance(value, str) else value


def blank_to_none(value: Any) -> Any:
    """Trim string input and turn blank or whitespace-only input into None."""
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


class SpeciesForm(Form):
    """Form backing the add and edit species dialogs."""

    scientific_name = StringField(
        "Scientific Name",
        filters=[strip_whitespace],
        validators=[DataRequired(message="Scientific name is required.")],
        render_kw={"placeholder": "Cavia porcellus"},
    )
    common_name = StringField(
        "Common Name",
        filters=[blank_to_none],
        render_kw={"placeholder": "Guinea pig"},
    )
    kingdom = SelectField(
        "Kingdom",
        choices=[(kingdom.value, kingdom.value) for kingdom in Kingdom],
        default=Kingdom.ANIMALIA.value,
    )
    total_population = IntegerField(
        "Total population",
        validators=[
            Optional(),
            NumberRange(min=1, message="Total population must be a positive whole number."),
            NumberRange(
                max=MAX_POPULATION, message="Total population is too large to store."
            ),
        ],
        render_kw={"placeholder": "300000", "min": 1},
    )
    image = URLField(
        "Image URL",
        filters=[blank_to_none],
        validators=[Optional(), URL(message="Image must be a valid URL.")],
        render_kw={"placeholder": "https://upload.wikimedia.org/wikipedia/commons/guinea_pig.jpg"},
    )
    description = TextAreaField(
        "Description",
        filters=[blank_to_none],
        render_kw={"placeholder": "The guinea pig or domestic guinea pig is a species of rodent."},
    )

    def to_values(self) -> SpeciesValues:
        """Build the normalised values of a validated form."""
        return SpeciesValues(
            scientific_name=self.scientific_name.data,
            common_name=self.common_name.data,
            kingdom=Kingdom(self.kingdom.data),
            total_population=self.total_population.data,
            image=self.image.data,
            description=self.description.data,
        )
