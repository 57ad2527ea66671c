#!/usr/bin/env python3
"""
Create the Group Buying database schema
=======================================

Creates products, orders, users, product_info_templates and site_settings
from the SQLAlchemy models. Existing tables are left untouched.

Usage:
    DATABASE_URL=postgresql://... python3 backend/scripts/init_db.py
"""
import os
import sys

SCRIPT_DIR = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, os.path.abspath(os.path.join(SCRIPT_DIR, '..')))

from groupbuy.core.database import init_schema  # noqa: E402


def main():
    print("🔧 Creating database schema...")
    try:
        init_schema()
    except Exception as e:
        print(f"❌ Schema creation failed: {e}")
        return 1
    print("✅ Schema ready")
    return 0


if __name__ == '__main__':
    sys.exit(main())
