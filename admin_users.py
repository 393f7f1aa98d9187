"""Admin accounts and login.

Only owners may create, edit or delete admin accounts. Owner accounts
themselves cannot be deleted.
"""
import logging
from werkzeug.security import check_password_hash, generate_password_hash
from extensions import db
from interview_logic import commit_or_rollback
from models import User
from utilities.constants import ADMIN_ROLES
from utilities.errors import AuthorizationError, NotFound, ValidationError
from utilities.validators import looks_like_email, require_fields

logger = logging.getLogger(__name__)


def hash_password(password):
    return generate_password_hash(password)


def authenticate_user(email, password, user_type='admin'):
    """Check credentials and that the account matches the login it came through.

    Admin logins need an admin, editor or owner role; candidate logins are
    refused for those roles.
    """
    user = User.query.filter_by(email=(email or '').strip()).first()
    if user is None or not user.password_hash or not check_password_hash(user.password_hash, password or ''):
        logger.info("Failed login for %s", email)
        raise ValidationError('Invalid email or password')

    if user_type == 'admin':
        if user.role not in ADMIN_ROLES:
            raise AuthorizationError('Access denied. Admin privileges required.')
    elif user.role in ADMIN_ROLES:
        raise AuthorizationError('Please use the admin login for your account.')

    logger.info("User %s logged in as %s", user.email, user_type)
    return user.to_dict()


def get_current_user_role(email):
    user = User.query.filter_by(email=email).first() if email else None
    return user.role if user else None


def _require_owner(current_user_email, action):
    if get_current_user_role(current_user_email) != 'owner':
        logger.warning("%s tried to %s users without owner role", current_user_email, action)
        raise AuthorizationError(f'Access denied. Only owners can {action} users.')


def _check_role(role):
    if role not in ADMIN_ROLES:
        raise ValidationError(f"Invalid role. Must be one of: {', '.join(ADMIN_ROLES)}")


def list_admin_users():
    users = (
        User.query
        .filter(User.role.in_(ADMIN_ROLES))
        .order_by(User.created_at.desc())
        .all()
    )
    return [u.to_dict() for u in users]


def create_admin_user(data, current_user_email):
    _require_owner(current_user_email, 'create')
    missing = require_fields(data, 'email', 'password', 'role')
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")
    email = data['email'].strip()
    if not looks_like_email(email):
        raise ValidationError('Invalid email address')
    _check_role(data['role'])
    if User.query.filter_by(email=email).first() is not None:
        raise ValidationError('User with this email already exists')

    user = User(
        email=email,
        first_name=data.get('first_name'),
        last_name=data.get('last_name'),
        password_hash=hash_password(data['password']),
        role=data['role'],
    )
    db.session.add(user)
    commit_or_rollback('create admin user')
    logger.info("Created %s account %s", user.role, user.email)
    return user.to_dict()


def update_admin_user(user_id, data, current_user_email):
    """Update profile fields and role; the password changes only when a new one is given."""
    _require_owner(current_user_email, 'update')
    user = db.session.get(User, user_id) if user_id else None
    if user is None:
        raise NotFound('User not found')

    email = (data.get('email') or user.email).strip()
    if not looks_like_email(email):
        raise ValidationError('Invalid email address')
    taken = User.query.filter(User.email == email, User.id != user_id).first()
    if taken is not None:
        raise ValidationError('Email is already taken by another user')
    role = data.get('role', user.role)
    _check_role(role)

    user.email = email
    user.first_name = data.get('first_name', user.first_name)
    user.last_name = data.get('last_name', user.last_name)
    user.role = role
    if data.get('password'):
        user.password_hash = hash_password(data['password'])
    commit_or_rollback('update admin user')
    logger.info("Updated account %s", user.email)
    return user.to_dict()


def delete_admin_user(user_id, current_user_email):
    _require_owner(current_user_email, 'delete')
    user = db.session.get(User, user_id) if user_id else None
    if user is None:
        raise NotFound('User not found')
    if user.role == 'owner':
        raise AuthorizationError('Cannot delete owner account')
    db.session.delete(user)
    commit_or_rollback('delete admin user')
    logger.info("Deleted account %s", user.email)
