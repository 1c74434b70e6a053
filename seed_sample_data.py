#!/usr/bin/env python3
"""
Insert sample students and scholarships for local development.

Safe to run repeatedly: students are matched on email and scholarships on
title, so existing rows are left alone.

Usage:
    python seed_sample_data.py --admin-email admin@example.com
"""

import argparse
import sys
from datetime import timedelta
from decimal import Decimal

from app import app, db, User, Scholarship
from application_lifecycle import today

SAMPLE_PASSWORD = 'password123'

SAMPLE_STUDENTS = [
    ('Ram Sharma', 'ram@example.com'),
    ('Sita Gurung', 'sita@example.com'),
    ('Hari Yadav', 'hari@example.com'),
    ('Gita Magar', 'gita@example.com'),
]

# (title, description, type, eligibility, days until deadline, amount)
SAMPLE_SCHOLARSHIPS = [
    ('National Merit Scholarship', 'Government scholarship for meritorious students',
     'Government', 'Minimum GPA 3.5', 90, Decimal('50000')),
    ('Women in STEM Scholarship', 'Private scholarship for women in STEM',
     'Private', 'Female students in STEM programs', 60, Decimal('75000')),
    ('University Entrance Scholarship', 'For top performers in entrance exams',
     'University', 'Top 100 rank in entrance', 30, Decimal('100000')),
    ('International Study Grant', 'For students studying abroad',
     'International', 'Admission to foreign university', 120, Decimal('200000')),
    ('Community Leaders Fund', 'NGO support for students leading community projects',
     'NGO', 'Proof of community service', 45, Decimal('25000')),
]


def seed(admin):
    """Add missing sample rows owned by ``admin``; returns (students, scholarships) created"""
    students_created = 0
    for name, email in SAMPLE_STUDENTS:
        if User.query.filter_by(email=email).first():
            continue
        student = User(name=name, email=email, role='student')
        student.set_password(SAMPLE_PASSWORD)
        db.session.add(student)
        students_created += 1

    scholarships_created = 0
    for title, description, scholarship_type, eligibility, days, amount in SAMPLE_SCHOLARSHIPS:
        if Scholarship.query.filter_by(title=title).first():
            continue
        db.session.add(Scholarship(
            admin_id=admin.id,
            title=title,
            description=description,
            scholarship_type=scholarship_type,
            eligibility=eligibility,
            deadline=today() + timedelta(days=days),
            amount=amount,
            status='active'
        ))
        scholarships_created += 1

    db.session.commit()
    return students_created, scholarships_created


def main(argv=None):
    parser = argparse.ArgumentParser(description='Seed sample students and scholarships')
    parser.add_argument('--admin-email', required=True, help='existing admin who will own the scholarships')
    args = parser.parse_args(argv)

    with app.app_context():
        admin = User.query.filter_by(email=args.admin_email.strip().lower(), role='admin').first()
        if not admin:
            print(f"✗ No admin account with email {args.admin_email}. Run create_admin.py first.")
            return 1

        students, scholarships = seed(admin)
        print(f"✓ Students created: {students}")
        print(f"✓ Scholarships created: {scholarships}")
        print(f"Student login password: {SAMPLE_PASSWORD}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
