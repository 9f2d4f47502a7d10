"""
Staff Authentication
====================
Google sign-in for the manual sync routes. Only accounts on
ALLOWED_DOMAIN get a session; nothing is persisted server-side.
"""

import logging
from flask import Blueprint, redirect, url_for, session, request, jsonify
from flask_login import LoginManager, UserMixin, login_user, logout_user
from authlib.integrations.flask_client import OAuth
from config import Config

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__)
login_manager = LoginManager()
oauth = OAuth()

# email -> StaffUser for users signed in since startup
_staff = {}


class StaffUser(UserMixin):
    def __init__(self, email):
        self.id = self.email = email


def is_allowed_email(email: str) -> bool:
    return bool(email) and email.lower().endswith(f'@{Config.ALLOWED_DOMAIN}')


@login_manager.user_loader
def load_user(email):
    return _staff.get(email)


@login_manager.unauthorized_handler
def unauthorized():
    """POST /sync gets a 401; page views go through Google sign-in"""
    if request.method != 'GET':
        return jsonify({"error": "Login required"}), 401
    session['next'] = request.path
    return redirect(url_for('auth.login'))


@auth_bp.route('/login')
def login():
    error = request.args.get('error')
    if error:
        return jsonify({"error": error}), 401
    return oauth.google.authorize_redirect(url_for('auth.callback', _external=True))


@auth_bp.route('/auth/callback')
def callback():
    try:
        token = oauth.google.authorize_access_token()
        email = (token.get('userinfo') or oauth.google.userinfo()).get('email', '').lower()
    except Exception as e:
        logger.error(f"OAuth callback error: {str(e)}", exc_info=True)
        return redirect(url_for('auth.login', error='Authentication failed'))

    if not is_allowed_email(email):
        logger.warning(f"Access denied - invalid domain: {email}")
        return redirect(url_for('auth.login', error=f'Access restricted to @{Config.ALLOWED_DOMAIN} accounts'))

    login_user(_staff.setdefault(email, StaffUser(email)), remember=True)
    logger.info(f"Login successful: {email}")
    return redirect(session.pop('next', None) or url_for('home'))


@auth_bp.route('/logout')
def logout():
    logout_user()
    return jsonify({"status": "logged out"})


def init_auth(app):
    """Wire Flask-Login, the Google OAuth client and the auth routes"""
    login_manager.init_app(app)
    oauth.init_app(app)
    oauth.register(
        name='google',
        client_id=Config.GOOGLE_CLIENT_ID,
        client_secret=Config.GOOGLE_CLIENT_SECRET,
        server_metadata_url='https://accounts.google.com/.well-known/openid-configuration',
        client_kwargs={'scope': 'openid email'}
    )
    app.register_blueprint(auth_bp)
    logger.info(f"Auth initialized - domain restriction: @{Config.ALLOWED_DOMAIN}")
