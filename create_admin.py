#!/usr/bin/env python3
"""
Script to create admin accounts for the Scholarship Portal

Admins cannot self-register through the API; this is the only way to
provision one.

Usage:
    python create_admin.py --name "Administrator" --email admin@example.com
    python create_admin.py --name "Administrator" --email admin@example.com --password 's3cret-pass'
"""

import argparse
import getpass
import sys

from app import app, db, User
from validators import validate_email, validate_password


def provision_admin(name, email, password):
    """Create and return an admin user; raises ValueError if the email is taken
    and ValidationError for a malformed email or short password"""
    email = validate_email(email.strip())
    validate_password(password)

    if User.query.filter(db.func.lower(User.email) == email).first():
        raise ValueError(f"An account with email {email} already exists")

    admin = User(name=name.strip(), email=email, role='admin')
    admin.set_password(password)
    db.session.add(admin)
    db.session.commit()
    return admin


def main(argv=None):
    parser = argparse.ArgumentParser(description='Create a Scholarship Portal admin account')
    parser.add_argument('--name', required=True)
    parser.add_argument('--email', required=True)
    parser.add_argument('--password', help='prompted for when omitted')
    args = parser.parse_args(argv)

    password = args.password or getpass.getpass('Admin password: ')

    with app.app_context():
        try:
            admin = provision_admin(args.name, args.email, password)
        except Exception as e:
            db.session.rollback()
            print(f"❌ Error creating admin: {e}")
            return 1

        print("✅ Admin account created successfully!")
        print(f"📧 Email: {admin.email}")
        print(f"👤 Name: {admin.name}")
        print("🔐 Role: admin")
    return 0


if __name__ == '__main__':
    sys.exit(main())
