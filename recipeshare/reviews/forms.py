"""
Comment form — text plus an optional 1-5 star rating.

Text and rating rules live in reviews.resolver; the form only parses
the fields and carries the CSRF token.
"""

from flask_wtf import FlaskForm
from wtforms import IntegerField, TextAreaField
from wtforms.validators import Optional


class CommentForm(FlaskForm):
    content = TextAreaField(
        'Comment',
        render_kw={'placeholder': 'Write a comment or ask a question...'},
    )
    # Empty means "no rating".
    rating = IntegerField('Rating', validators=[Optional()])
