"""
Admin authentication for Station Directory

Provides:
- HTTP Basic Authentication for admin API routes
- Password hashing and verification with bcrypt
- Password reset by deleting the auth file
- Login attempt tracking (brute force protection)

Listener routes (play, like, feedback, browsing) are public. Admin routes
are wrapped with @requires_auth, which only enforces credentials once an
auth file exists (create one with `--set-password USER`).
"""

import os
import json
import logging
import threading
from datetime import datetime, timedelta
from functools import wraps

import bcrypt
from flask import request, jsonify
from flask_httpauth import HTTPBasicAuth

logger = logging.getLogger(__name__)

# Constants
AUTH_FILE_ENV_VAR = 'STATION_DIRECTORY_AUTH_FILE'
DEFAULT_AUTH_FILE = 'station_directory_auth.json'
MAX_LOGIN_ATTEMPTS = 5
LOCKOUT_DURATION_MINUTES = 5

auth = HTTPBasicAuth()
failed_attempts = {}  # IP address -> {'attempts': int, 'locked_until': datetime}
_failed_attempts_lock = threading.Lock()


def get_auth_file():
    return os.environ.get(AUTH_FILE_ENV_VAR, DEFAULT_AUTH_FILE)


def is_auth_enabled():
    """Check if authentication is enabled

    Returns:
        True if auth file exists, False otherwise
    """
    return os.path.exists(get_auth_file())


def load_auth_config():
    """Load authentication configuration from JSON file

    Returns:
        dict with 'username' and 'password_hash' keys, or None if file doesn't exist
    """
    auth_file = get_auth_file()
    if not os.path.exists(auth_file):
        return None

    try:
        with open(auth_file, 'r') as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        logger.error(f"Error loading auth config: {e}")
        return None


def save_auth_config(username, password_hash):
    """Save authentication configuration to JSON file

    Args:
        username: Username (plain text)
        password_hash: Bcrypt hash of password

    Returns:
        True if saved successfully, False otherwise
    """
    from station_directory import __version__

    auth_file = get_auth_file()
    config = {
        'username': username,
        'password_hash': password_hash,
        'created_at': datetime.now().isoformat(),
        'version': __version__
    }

    try:
        with open(auth_file, 'w') as f:
            json.dump(config, f, indent=2)
        logger.info(f"Auth config saved to {auth_file}")
        return True
    except OSError as e:
        logger.error(f"Error saving auth config: {e}")
        return False


def hash_password(password):
    """Hash a password using bcrypt

    Args:
        password: Plain text password

    Returns:
        Bcrypt hash string
    """
    salt = bcrypt.gensalt()
    return bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')


def verify_password(password, hashed):
    """Verify a password against a bcrypt hash

    Returns:
        True if password matches, False otherwise
    """
    try:
        return bcrypt.checkpw(password.encode('utf-8'), hashed.encode('utf-8'))
    except (ValueError, TypeError, AttributeError) as e:
        logger.error(f"Error verifying password: {e}")
        return False


def is_ip_locked(ip_address, now=None):
    """Check if IP address is locked due to too many failed attempts

    Returns:
        True if locked, False otherwise
    """
    now = now or datetime.now()

    with _failed_attempts_lock:
        attempt_data = failed_attempts.get(ip_address)
        if not attempt_data or not attempt_data.get('locked_until'):
            return False

        if now < attempt_data['locked_until']:
            return True

        # Lockout expired, clear attempts
        del failed_attempts[ip_address]
        return False


def record_failed_attempt(ip_address, now=None):
    """Record a failed login attempt and lock out if necessary

    Returns:
        True if IP is now locked, False otherwise
    """
    now = now or datetime.now()

    with _failed_attempts_lock:
        attempt_data = failed_attempts.setdefault(ip_address, {'attempts': 0})
        attempt_data['attempts'] += 1

        if attempt_data['attempts'] >= MAX_LOGIN_ATTEMPTS:
            attempt_data['locked_until'] = now + timedelta(minutes=LOCKOUT_DURATION_MINUTES)
            logger.warning(f"IP {ip_address} locked out until {attempt_data['locked_until']} "
                           f"({attempt_data['attempts']} failed attempts)")
            return True

        logger.warning(f"Failed login attempt from {ip_address} "
                       f"({attempt_data['attempts']}/{MAX_LOGIN_ATTEMPTS})")
        return False


def clear_failed_attempts(ip_address):
    with _failed_attempts_lock:
        failed_attempts.pop(ip_address, None)


@auth.verify_password
def verify_auth(username, password):
    """Flask-HTTPAuth password verifier

    Returns:
        Username if credentials valid, None otherwise
    """
    ip_address = request.remote_addr or 'unknown'
    if is_ip_locked(ip_address):
        logger.warning(f"Locked out IP attempted login: {ip_address}")
        return None

    config = load_auth_config()
    if not config:
        return None

    # No credentials sent (first request of the Basic auth challenge)
    if not username:
        return None

    if username == config.get('username') and verify_password(password or '', config.get('password_hash', '')):
        clear_failed_attempts(ip_address)
        logger.info(f"Successful admin login for {username} from {ip_address}")
        return username

    record_failed_attempt(ip_address)
    return None


@auth.error_handler
def auth_error(status):
    """Handle authentication errors with a JSON body"""
    ip_address = request.remote_addr or 'unknown'

    if is_ip_locked(ip_address):
        message = 'Too many failed login attempts. Try again later.'
    else:
        message = 'Authentication required'

    response = jsonify({'success': False, 'error': message})
    response.status_code = status
    return response


def requires_auth(f):
    """Decorator to require admin authentication for a route

    Only enforces auth if the auth file exists.

    Usage:
        @bp.route('/api/admin/example', methods=['POST'])
        @requires_auth
        def example():
            return jsonify({'success': True})
    """
    protected = auth.login_required(f)

    @wraps(f)
    def decorated(*args, **kwargs):
        if is_auth_enabled():
            return protected(*args, **kwargs)
        return f(*args, **kwargs)

    return decorated
