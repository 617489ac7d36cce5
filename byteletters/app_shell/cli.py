import argparse
import logging
import sys
from pathlib import Path

from byteletters.adapters.auth.crypto import build_password_hasher
from byteletters.adapters.clock import SystemClock
from byteletters.adapters.sqlite.migrator import SQLiteMigrator
from byteletters.adapters.sqlite.repos import SQLiteUserStore
from byteletters.app_shell.config import (
    AppSettings,
    load_admin_seed_config,
    load_settings,
)
from byteletters.components.provision import ProvisionInput, run_provision
from byteletters.domain.errors import ConfigError, ProvisionError

logger = logging.getLogger("cli")

BANNER = "=" * 50


def _prepare_db(settings: AppSettings, db_path: str) -> None:
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    applied = SQLiteMigrator(db_path, str(settings.migrations_dir)).run_migrations()
    for filename in applied:
        logger.info("Applied migration %s", filename)


def handle_migrate(settings: AppSettings, args: argparse.Namespace) -> int:
    db_path = args.db_path or settings.db_path
    _prepare_db(settings, db_path)
    print(f"Database ready at {db_path}")
    return 0


def handle_seed_admin(settings: AppSettings, args: argparse.Namespace) -> int:
    seed = load_admin_seed_config(email=args.email, name=args.name)
    db_path = args.db_path or settings.db_path

    print(BANNER)
    print("SEEDING ADMIN USER")
    print(BANNER)
    print(f"Email: {seed.email}")
    print("")

    hasher = build_password_hasher(settings.hash_scheme, settings.bcrypt_rounds)
    _prepare_db(settings, db_path)

    store = SQLiteUserStore.open(db_path)
    try:
        result = run_provision(
            ProvisionInput(
                email=seed.email,
                password=seed.password.get_secret_value(),
                name=seed.name,
            ),
            user_store=store,
            hasher=hasher,
            time=SystemClock(),
        )
    finally:
        store.close()

    if result.created:
        print("Created new admin user")
    else:
        print("Updated existing user to admin")

    print("")
    print(BANNER)
    print("ADMIN USER READY")
    print(BANNER)
    print(f"Email: {result.user.email}")
    print("Password: [set as configured]")
    print(f"isAdmin: {str(result.user.is_admin).lower()}")
    print(f"Outcome: {result.outcome.value}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="ByteLetters account tooling")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # seed-admin
    seed_parser = subparsers.add_parser(
        "seed-admin",
        help="Create or update the admin user (password from BYTELETTERS_ADMIN_PASSWORD)",
    )
    seed_parser.add_argument("--email", help="Admin email (default: BYTELETTERS_ADMIN_EMAIL)")
    seed_parser.add_argument("--name", help="Display name (default: BYTELETTERS_ADMIN_NAME)")
    seed_parser.add_argument("--db-path", help="SQLite database file (default: data dir)")

    # migrate
    migrate_parser = subparsers.add_parser("migrate", help="Apply pending database migrations")
    migrate_parser.add_argument("--db-path", help="SQLite database file (default: data dir)")

    return parser


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=logging.INFO)
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings()
        if args.command == "seed-admin":
            return handle_seed_admin(settings, args)
        elif args.command == "migrate":
            return handle_migrate(settings, args)
    except ConfigError as e:
        logger.error("Configuration error: %s", e)
        return 1
    except (ProvisionError, OSError) as e:
        logger.error("%s failed: %s: %s", args.command, type(e).__name__, e)
        return 1

    logger.error("Unknown command %s", args.command)
    return 1


if __name__ == "__main__":
    sys.exit(main())
