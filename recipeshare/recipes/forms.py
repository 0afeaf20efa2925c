"""
Recipe form.

Ingredients and instructions are typed one per line; blank lines are
dropped and at least one of each is required. Category choices are
filled in by the view from the categories table.
"""

import os

from flask import current_app
from flask_wtf import FlaskForm
from flask_wtf.file import FileField
from wtforms import IntegerField, SelectField, StringField, TextAreaField
from wtforms import validators
from wtforms.validators import DataRequired, Length, NumberRange, Optional

from recipeshare.recipes.models import split_lines


def optional_int(value):
    """SelectField coercion where the empty choice means None."""
    if value in (None, ''):
        return None
    return int(value)


class RecipeForm(FlaskForm):
    title = StringField(
        'Title',
        validators=[
            DataRequired(message='Title is required.'),
            Length(max=200, message='Title is limited to 200 characters.'),
        ],
    )
    description = TextAreaField(
        'Description',
        validators=[Optional(), Length(max=2000, message='Description is limited to 2000 characters.')],
    )
    category_id = SelectField('Category', coerce=optional_int, choices=[('', 'No category')])
    time_minutes = IntegerField(
        'Total time (minutes)',
        validators=[
            Optional(),
            NumberRange(min=1, max=24 * 60, message='Time must be between 1 and 1440 minutes.'),
        ],
    )
    ingredients = TextAreaField('Ingredients (one per line)')
    instructions = TextAreaField('Instructions (one step per line)')
    image = FileField('Image')

    def set_categories(self, categories) -> None:
        self.category_id.choices = [('', 'No category')] + [
            (c['id'], f"{c['emoji']} {c['name']}" if c['emoji'] else c['name'])
            for c in categories
        ]

    def validate_ingredients(self, field):
        if not split_lines(field.data):
            raise validators.ValidationError('Please add at least one ingredient')

    def validate_instructions(self, field):
        if not split_lines(field.data):
            raise validators.ValidationError('Please add at least one instruction')

    def validate_image(self, field):
        upload = field.data
        if not upload:
            return
        filename = upload.filename or ''
        ext = filename.rsplit('.', 1)[-1].lower() if '.' in filename else ''
        if ext not in current_app.config['ALLOWED_IMAGE_EXTENSIONS']:
            raise validators.ValidationError('Please select a valid image file')

        stream = upload.stream
        stream.seek(0, os.SEEK_END)
        size = stream.tell()
        stream.seek(0)
        if size > current_app.config['MAX_IMAGE_BYTES']:
            raise validators.ValidationError('Image size must be less than 5MB')

    @property
    def ingredient_list(self):
        return split_lines(self.ingredients.data)

    @property
    def instruction_list(self):
        return split_lines(self.instructions.data)
