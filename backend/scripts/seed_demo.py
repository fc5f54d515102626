#!/usr/bin/env python
"""Idempotent seed script for a demo tenant.

Creates one company, an admin and a buyer login, and a couple of suppliers so
the purchase endpoints have something to work with.

Usage:
    python backend/scripts/seed_demo.py               # seed normally
    python backend/scripts/seed_demo.py --dry-run     # run logic then rollback (no DB changes)
    python backend/scripts/seed_demo.py --show-perms  # print role -> permission codes
"""
from __future__ import annotations
import argparse, os, pathlib, sys
from sqlalchemy import select

# Allow running from repo root
sys.path.insert(0, str(pathlib.Path(__file__).resolve().parents[1]))

from procurement import create_app, get_db  # noqa: E402
from procurement.constants.permissions import ROLE_PRESETS  # noqa: E402
from procurement.models.authz import Base, Company, User  # noqa: E402
from procurement.models.supplier import Supplier  # noqa: E402
import procurement.models.audit  # noqa: E402,F401
import procurement.models.purchase_order  # noqa: E402,F401
import procurement.models.inventory_item  # noqa: E402,F401

DEMO_SUPPLIERS = (('Acme Textiles', 'Raw Material'), ('Blue Dye Works', 'Chemicals'))


def ensure_company(session, name):
    company = session.execute(select(Company).where(Company.name == name)).scalar_one_or_none()
    if company:
        return company, False
    company = Company(name=name)
    session.add(company)
    session.flush()
    return company, True


def ensure_user(session, email, password, company, role, is_admin=False):
    user = session.execute(select(User).where(User.email == email)).scalar_one_or_none()
    if user:
        return user, False
    user = User(name=email.split('@')[0], email=email, password_hash='', role=role, is_admin=is_admin,
                company_id=company.id)
    user.set_password(password)
    session.add(user)
    session.flush()
    return user, True


def ensure_suppliers(session, company, actor_id):
    created = 0
    for name, category in DEMO_SUPPLIERS:
        exists = session.execute(
            select(Supplier).where(Supplier.company_id == company.id, Supplier.name == name)
        ).scalar_one_or_none()
        if not exists:
            session.add(Supplier(company_id=company.id, name=name, category=category, created_by=actor_id))
            created += 1
    return created


def print_role_presets():
    name_w = max(len(r) for r in ROLE_PRESETS)
    print(f"{'Role'.ljust(name_w)} | Permissions")
    print('-' * (name_w + 40))
    for role, codes in ROLE_PRESETS.items():
        print(f"{role.ljust(name_w)} | {', '.join(codes)}")


def parse_args():
    p = argparse.ArgumentParser(description="Seed a demo procurement tenant")
    p.add_argument('--dry-run', action='store_true', help='Rollback after operations (no commit)')
    p.add_argument('--show-perms', action='store_true', help='Print role permission presets after seeding')
    return p.parse_args()


def main():
    args = parse_args()
    app = create_app()
    with app.app_context():
        session = get_db()
        # Lightweight bootstrap if migrations have not been run yet
        Base.metadata.create_all(session.get_bind())
        try:
            company, new_company = ensure_company(session, os.getenv('SEED_COMPANY', 'Demo Company'))
            admin, _ = ensure_user(session, os.getenv('SEED_ADMIN_EMAIL', 'admin@example.com'),
                                   os.getenv('SEED_ADMIN_PASSWORD', 'ChangeMe123!'), company, User.ROLE_ADMIN,
                                   is_admin=True)
            _, new_buyer = ensure_user(session, os.getenv('SEED_BUYER_EMAIL', 'buyer@example.com'),
                                       os.getenv('SEED_BUYER_PASSWORD', 'ChangeMe123!'), company, User.ROLE_BUYER)
            created_s = ensure_suppliers(session, company, admin.id)
            if args.dry_run:
                session.rollback()
                print(f"[DRY-RUN] (rolled back) company new={new_company}, buyer new={new_buyer}, suppliers={created_s}")
            else:
                session.commit()
                print(f"[DONE] company id={company.id}, suppliers created: {created_s}")
            if args.show_perms:
                print_role_presets()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()


if __name__ == '__main__':
    main()
