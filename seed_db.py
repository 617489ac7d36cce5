"""
Seed the admin user.

Reads BYTELETTERS_ADMIN_EMAIL / BYTELETTERS_ADMIN_PASSWORD / BYTELETTERS_ADMIN_NAME
and creates or updates that account with admin rights.

Run with: python seed_db.py
"""

import sys

from byteletters.app_shell.cli import main

if __name__ == "__main__":
    sys.exit(main(["seed-admin", *sys.argv[1:]]))
