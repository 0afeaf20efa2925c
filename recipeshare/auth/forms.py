"""
Account forms.

Server-side validation is authoritative; HTML5 attributes are a
convenience only.
"""

from flask_wtf import FlaskForm
from wtforms import EmailField, PasswordField, StringField, TextAreaField, URLField
from wtforms.validators import (
    DataRequired,
    Email,
    EqualTo,
    Length,
    Optional,
    Regexp,
    URL,
)


class LoginForm(FlaskForm):
    """Email and password."""

    email = EmailField(
        'Email address',
        validators=[
            DataRequired(message='Email address is required.'),
            Email(message='Please enter a valid email address.'),
            # RFC 5321 limit.
            Length(max=254, message='Email address is too long.'),
        ],
        render_kw={'autofocus': True, 'autocomplete': 'email'},
    )

    password = PasswordField(
        'Password',
        validators=[
            DataRequired(message='Password is required.'),
            Length(max=128, message='Password is too long.'),
        ],
        render_kw={'autocomplete': 'current-password'},
    )


class SignUpForm(FlaskForm):
    """New account: username, optional full name, email, password twice."""

    username = StringField(
        'Username',
        validators=[
            DataRequired(message='Username is required.'),
            Length(min=3, max=30, message='Username must be 3 to 30 characters.'),
            Regexp(
                r'^[A-Za-z0-9_]+$',
                message='Username may only contain letters, numbers and underscores.',
            ),
        ],
        render_kw={'autocomplete': 'username'},
    )

    full_name = StringField(
        'Full name (optional)',
        validators=[Optional(), Length(max=100, message='Full name is too long.')],
        render_kw={'autocomplete': 'name'},
    )

    email = EmailField(
        'Email address',
        validators=[
            DataRequired(message='Email address is required.'),
            Email(message='Please enter a valid email address.'),
            Length(max=254, message='Email address is too long.'),
        ],
        render_kw={'autocomplete': 'email'},
    )

    password = PasswordField(
        'Password',
        validators=[
            DataRequired(message='Password is required.'),
            Length(min=8, message='Password must be at least 8 characters.'),
            Length(max=128, message='Password is too long.'),
        ],
        render_kw={'autocomplete': 'new-password'},
    )

    confirm_password = PasswordField(
        'Confirm password',
        validators=[
            DataRequired(message='Please confirm your password.'),
            EqualTo('password', message='Passwords do not match.'),
        ],
        render_kw={'autocomplete': 'new-password'},
    )


class ProfileForm(FlaskForm):
    """Editable profile fields."""

    full_name = StringField(
        'Full name',
        validators=[Optional(), Length(max=100, message='Full name is too long.')],
    )
    bio = TextAreaField(
        'Bio',
        validators=[Optional(), Length(max=500, message='Bio is limited to 500 characters.')],
    )
    avatar_url = URLField(
        'Avatar URL',
        validators=[
            Optional(),
            URL(message='Please enter a valid URL.'),
            Length(max=500, message='Avatar URL is too long.'),
        ],
    )
