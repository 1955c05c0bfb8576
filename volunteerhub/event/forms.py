"""Forms for the event blueprint."""

from flask_wtf import FlaskForm
from wtforms import DateTimeLocalField, IntegerField, StringField, TextAreaField
from wtforms.validators import DataRequired, NumberRange


class EventForm(FlaskForm):
    """Form for creating a new event in a group."""

    group_id = StringField("Group", validators=[DataRequired()])
    title = StringField("Event Title", validators=[DataRequired()])
    date = DateTimeLocalField(
        "Date and Time",
        format=["%Y-%m-%dT%H:%M", "%Y-%m-%dT%H:%M:%S"],
        validators=[DataRequired()],
    )
    location = StringField("Location", validators=[DataRequired()])
    description = TextAreaField("Description", validators=[DataRequired()])
    max_participants = IntegerField(
        "Max Participants",
        default=10,
        validators=[
            NumberRange(min=1, message="Max participants must be greater than 0."),
        ],
    )
