"""
Account routes — sign-up, login, logout, profile.

Login POST flow:
1. Rate limiter (per IP)
2. CSRF validation (flask-wtf before_request hook)
3. WTForms validation
4. Timing-safe credential check (bcrypt always runs)
5. Session regeneration and audit logging
"""

from flask import current_app, flash, g, redirect, render_template, request, url_for

from recipeshare.auth import auth_bp
from recipeshare.auth.forms import LoginForm, ProfileForm, SignUpForm
from recipeshare.auth.models import (
    create_user,
    email_taken,
    get_user_by_id,
    update_profile,
    username_taken,
)
from recipeshare.auth.security import (
    hash_password,
    log_login_failed,
    log_login_success,
    log_logout,
    log_signup,
    verify_credentials,
)
from recipeshare.auth.session import (
    anonymous_only,
    end_session,
    is_safe_next,
    load_current_user,
    login_required,
    start_session,
)
from recipeshare.errors import ValidationError
from recipeshare.extensions import limiter
from recipeshare.favorites.models import count_for_user as favorites_count
from recipeshare.recipes.models import count_for_user as recipes_count

auth_bp.before_app_request(load_current_user)


@auth_bp.app_context_processor
def inject_current_user() -> dict:
    return {'current_user': g.get('user')}


@auth_bp.route('/login', methods=['GET', 'POST'])
@limiter.limit(
    lambda: current_app.config.get('LOGIN_RATE_LIMIT_IP', '10/minute'),
    methods=['POST'],
    error_message='Too many login attempts. Please wait a moment and try again.',
)
@anonymous_only
def login():
    """Sign in with email and password; errors never say which part was wrong."""
    form = LoginForm()

    if form.validate_on_submit():
        email = form.email.data.strip().lower()
        user = verify_credentials(email, form.password.data)

        if user is None:
            log_login_failed(email)
            flash('Invalid email or password.', 'error')
            return render_template('auth/login.html', form=form), 200

        start_session(user)
        log_login_success(user['id'], email)
        flash('Logged in successfully!', 'success')

        target = request.args.get('next')
        if is_safe_next(target):
            return redirect(target)
        return redirect(url_for('recipes.dashboard'))

    return render_template('auth/login.html', form=form)


@auth_bp.route('/signup', methods=['GET', 'POST'])
@limiter.limit(
    lambda: current_app.config.get('SIGNUP_RATE_LIMIT_IP', '5/minute'),
    methods=['POST'],
    error_message='Too many sign-up attempts. Please wait a moment and try again.',
)
@anonymous_only
def signup():
    """Create an account, then send the user to the login page."""
    form = SignUpForm()

    if form.validate_on_submit():
        email = form.email.data.strip().lower()
        username = form.username.data.strip()

        if username_taken(username):
            form.username.errors.append('That username is already taken.')
        if email_taken(email):
            form.email.errors.append('An account with that email already exists.')
        if form.username.errors or form.email.errors:
            return render_template('auth/signup.html', form=form), 200

        try:
            user_id = create_user(
                email=email,
                username=username,
                full_name=(form.full_name.data or '').strip(),
                password_hash=hash_password(form.password.data),
            )
        except ValidationError as exc:
            flash(exc.message, 'error')
            return render_template('auth/signup.html', form=form), 200

        log_signup(user_id, email)
        flash('Account created! Please log in.', 'success')
        return redirect(url_for('auth.login'))

    return render_template('auth/signup.html', form=form)


@auth_bp.route('/logout', methods=['POST'])
@login_required
def logout():
    """POST-only, so a cross-site <img> cannot sign users out."""
    user_id = g.user['id']
    end_session()
    log_logout(user_id)
    flash('Signed out successfully', 'info')
    return redirect(url_for('recipes.index'))


@auth_bp.route('/profile', methods=['GET', 'POST'])
@login_required
def profile():
    """Profile overview with the edit form."""

    user = g.user
    # Submitted values take precedence over these defaults on POST.
    form = ProfileForm(data={
        'full_name': user['full_name'],
        'bio': user['bio'],
        'avatar_url': user['avatar_url'],
    })

    if form.validate_on_submit():
        update_profile(
            user['id'],
            full_name=(form.full_name.data or '').strip(),
            bio=(form.bio.data or '').strip(),
            avatar_url=(form.avatar_url.data or '').strip(),
        )
        g.user = get_user_by_id(user['id'])
        flash('Profile updated.', 'success')
        return redirect(url_for('auth.profile'))

    return render_template(
        'auth/profile.html',
        form=form,
        user=user,
        recipe_count=recipes_count(user['id']),
        saved_count=favorites_count(user['id']),
    )
