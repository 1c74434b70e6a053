#!/usr/bin/env python3
"""
Script to verify the database connection, required tables and constraints
"""

import sys

from sqlalchemy import text, inspect

from app import app, db, REQUIRED_TABLES


def table_status():
    """Map each required table to whether it exists"""
    db.session.execute(text("SELECT 1"))
    existing_tables = set(inspect(db.engine).get_table_names())
    return {table: table in existing_tables for table in REQUIRED_TABLES}


def has_unique_application_constraint():
    """applications must be unique on (scholarship_id, student_id)"""
    inspector = inspect(db.engine)
    expected = {'scholarship_id', 'student_id'}
    for constraint in inspector.get_unique_constraints('applications'):
        if set(constraint['column_names']) == expected:
            return True
    for index in inspector.get_indexes('applications'):
        if index.get('unique') and set(index['column_names']) == expected:
            return True
    return False


def main():
    print("=" * 70)
    print("DATABASE STRUCTURE")
    print("=" * 70)
    with app.app_context():
        try:
            tables = table_status()
        except Exception as e:
            print(f"✗ Database connection: FAILED - {e}")
            return False
        print("✓ Database connection: OK")

        for table, exists in tables.items():
            print(f"{'✓' if exists else '✗'} Table '{table}': {'EXISTS' if exists else 'MISSING'}")
        if not all(tables.values()):
            return False

        if has_unique_application_constraint():
            print("✓ applications: UNIQUE(scholarship_id, student_id)")
        else:
            print("✗ applications: missing UNIQUE(scholarship_id, student_id)")
            return False

    print("\n✓ Database structure verified")
    return True


if __name__ == '__main__':
    sys.exit(0 if main() else 1)
