"""Forms for the group blueprint."""

from flask_wtf import FlaskForm
from wtforms import RadioField, StringField, TextAreaField
from wtforms.validators import DataRequired, Optional

from volunteerhub.constants import GROUP_PRIVACY_CHOICES, PRIVACY_PUBLIC


class GroupForm(FlaskForm):
    """Form for creating a new group."""

    name = StringField("Group Name", validators=[DataRequired()])
    description = TextAreaField("Description", validators=[DataRequired()])
    privacy = RadioField(
        "Privacy",
        choices=[(choice, choice.title()) for choice in GROUP_PRIVACY_CHOICES],
        default=PRIVACY_PUBLIC,
        validators=[Optional()],
    )


class ApproveRequestForm(FlaskForm):
    """Optional override of the name stored on an approved membership."""

    name = StringField("Name", validators=[Optional()])
