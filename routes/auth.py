"""
Authentication Routes
JSON endpoints for registration, login, logout and the current-user lookup.
"""

from flask import Blueprint, request, jsonify
from flask_login import login_user, logout_user, login_required, current_user
from models import db, User
import re
import logging


auth_bp = Blueprint('auth', __name__, url_prefix='/auth')

logger = logging.getLogger(__name__)


def is_valid_email(email):
    """Validate email format."""
    pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
    return re.match(pattern, email) is not None


def is_valid_password(password):
    """Validate password strength."""
    if len(password) < 8:
        return False, "Password must be at least 8 characters long"
    if not re.search(r'[A-Za-z]', password):
        return False, "Password must contain at least one letter"
    if not re.search(r'[0-9]', password):
        return False, "Password must contain at least one number"
    return True, "Valid password"


def _credentials():
    data = request.get_json(silent=True) or {}
    email = str(data.get('email') or '').strip().lower()
    password = str(data.get('password') or '')
    remember = bool(data.get('remember', False))
    return email, password, remember


@auth_bp.route('/register', methods=['POST'])
def register():
    """Create an account and sign it in."""
    email, password, remember = _credentials()

    if not email:
        return jsonify({'success': False, 'message': 'Email is required'}), 400
    if not is_valid_email(email):
        return jsonify({'success': False, 'message': 'Please enter a valid email address'}), 400

    valid, message = is_valid_password(password)
    if not valid:
        return jsonify({'success': False, 'message': message}), 400

    if db.session.query(User).filter_by(email=email).first():
        return jsonify({'success': False, 'message': 'An account with this email already exists'}), 409

    try:
        user = User(email=email)
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        logger.error(f"Registration failed for {email}: {e}", exc_info=True)
        return jsonify({'success': False, 'message': 'Registration failed'}), 500

    login_user(user, remember=remember)
    logger.info(f"Registered user {user.id}")
    return jsonify({'success': True, 'user': user.to_dict()}), 201


@auth_bp.route('/login', methods=['POST'])
def login():
    """Sign in with email and password."""
    email, password, remember = _credentials()

    if not email or not password:
        return jsonify({'success': False, 'message': 'Please enter both email and password'}), 400

    user = db.session.query(User).filter_by(email=email).first()
    if not user or not user.check_password(password):
        logger.warning(f"Login failed for: {email}")
        return jsonify({'success': False, 'message': 'Invalid email or password'}), 401

    login_user(user, remember=remember)
    logger.info(f"Login successful for user {user.id}")
    return jsonify({'success': True, 'user': user.to_dict()})


@auth_bp.route('/logout', methods=['POST'])
@login_required
def logout():
    """Sign out the current session."""
    user_id = current_user.id
    logout_user()
    logger.info(f"User {user_id} signed out")
    return jsonify({'success': True})


@auth_bp.route('/api/user')
@login_required
def api_user():
    """Current user identity."""
    return jsonify({'success': True, 'user': current_user.to_dict()})
