from flask import Flask
from procurement import get_db
from procurement.models.authz import User
from scripts.seed_demo import DEMO_SUPPLIERS, ensure_company, ensure_suppliers, ensure_user
from tests.test_utils_seed import unique


def test_seed_helpers_are_idempotent(app_context: Flask):
    session = get_db()
    name = unique('Seed Co')
    company, created = ensure_company(session, name)
    assert created
    again, created = ensure_company(session, name)
    assert again.id == company.id and not created
    email = f'{unique("seed")}@example.com'
    user, created = ensure_user(session, email, 'pw', company, User.ROLE_BUYER)
    assert created and user.verify_password('pw')
    assert ensure_user(session, email, 'other', company, User.ROLE_BUYER)[1] is False
    assert ensure_suppliers(session, company, user.id) == len(DEMO_SUPPLIERS)
    session.flush()
    assert ensure_suppliers(session, company, user.id) == 0
    session.rollback()
