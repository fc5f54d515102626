from flask import Blueprint, request
from flask_jwt_extended import create_access_token, jwt_required, get_jwt_identity
from sqlalchemy import select
from procurement import get_db
from procurement.errors import InvalidArgument, NotFound, Unauthorized
from procurement.models.authz import User
from procurement.services.policy import build_claims, permissions_for
from procurement.services.reporting import envelope

auth_bp = Blueprint('auth', __name__)


def _body():
    data = request.json
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidArgument('JSON object body required')
    return data


@auth_bp.post('/auth/login')
def login():
    data = _body()
    email = data.get('email'); password = data.get('password')
    if not email or not password:
        raise InvalidArgument('email & password required')
    session = get_db()
    user = session.execute(select(User).where(User.email==email)).scalar_one_or_none()
    if not user or not user.is_active or not user.verify_password(password):
        raise Unauthorized('invalid credentials')
    # JWT identity must be a string (flask-jwt-extended v4 requirement)
    token = create_access_token(identity=str(user.id), additional_claims=build_claims(user))
    return envelope({'access_token': token}, 'Login successful')


@auth_bp.get('/auth/me')
@jwt_required()
def me():
    # Identity stored as string, cast back to int for DB lookup
    user_id = int(get_jwt_identity())
    session = get_db()
    user = session.execute(select(User).where(User.id==user_id)).scalar_one_or_none()
    if not user:
        raise NotFound('User not found')
    return envelope({
        'id': user.id,
        'name': user.name,
        'email': user.email,
        'role': user.role,
        'is_admin': bool(user.is_admin),
        'company_id': user.company_id,
        'perms': permissions_for(user),
    })
