"""CLI for database setup, demo data, admin management and migrations."""
import argparse
import subprocess
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]


def _session():
    from visionsprint.core.database import get_session_local

    return get_session_local()()


def cmd_init_db(args):
    """Create all tables that do not exist yet."""
    from visionsprint.core.database import init_db

    init_db()
    print("Database tables created")
    return 0


def cmd_reset_db(args):
    """Drop and recreate every table."""
    from visionsprint.core.database import drop_db, init_db

    if not args.yes:
        answer = input("This deletes ALL data. Type 'yes' to continue: ")
        if answer.strip().lower() != "yes":
            print("Aborted")
            return 1
    drop_db()
    init_db()
    print("Database reset")
    return 0


def cmd_seed(args):
    """Insert demo users, a sprint, projects and votes."""
    from visionsprint.core.database import init_db
    from visionsprint.services.seed_service import seed_demo_data

    init_db()
    db = _session()
    try:
        created = seed_demo_data(db)
    finally:
        db.close()
    for kind, count in created.items():
        print(f"  {kind}: {count} created")
    return 0


def cmd_make_admin(args):
    """Grant (or with --revoke, remove) admin rights."""
    from visionsprint.core.exceptions import NotFoundError
    from visionsprint.services.user_service import UserService

    db = _session()
    try:
        user = UserService(db).set_admin(args.email, is_admin=not args.revoke)
    except NotFoundError as e:
        print(e.message)
        print("The user must sign in once before they can be made an admin")
        return 1
    finally:
        db.close()
    print(f"{user.email}: admin={user.is_admin}")
    return 0


def cmd_list_users(args):
    """Print all users."""
    from visionsprint.services.user_service import UserService

    db = _session()
    try:
        users = UserService(db).list_users()
        for user in users:
            flags = []
            if user.is_admin:
                flags.append("admin")
            if user.access_verified:
                flags.append("verified")
            print(f"{user.id}  {user.email or '-':<32} {user.name or '-':<24} {user.discipline or '-':<9} {','.join(flags)}")
    finally:
        db.close()
    return 0


def cmd_migrate(args):
    """Run alembic upgrade to a revision (default head)."""
    return subprocess.call([sys.executable, "-m", "alembic", "upgrade", args.revision], cwd=str(ROOT))


def cmd_stamp(args):
    """Stamp alembic revision (pass-through to alembic stamp)."""
    return subprocess.call([sys.executable, "-m", "alembic", "stamp", args.revision], cwd=str(ROOT))


def build_parser():
    p = argparse.ArgumentParser(prog="visionsprint")
    sub = p.add_subparsers(dest="cmd")
    s = sub.add_parser("init-db", help="Create missing tables")
    s.set_defaults(func=cmd_init_db)
    s = sub.add_parser("reset-db", help="Drop and recreate all tables")
    s.add_argument("--yes", "-y", action="store_true", help="Do not ask for confirmation")
    s.set_defaults(func=cmd_reset_db)
    s = sub.add_parser("seed", help="Insert demo data")
    s.set_defaults(func=cmd_seed)
    s = sub.add_parser("make-admin", help="Grant admin rights to a user")
    s.add_argument("email", help="Email of an existing user")
    s.add_argument("--revoke", action="store_true", help="Remove admin rights instead")
    s.set_defaults(func=cmd_make_admin)
    s = sub.add_parser("list-users", help="List users")
    s.set_defaults(func=cmd_list_users)
    s = sub.add_parser("migrate", help="Run migrations (upgrade head)")
    s.add_argument("--revision", "-r", help="Target revision", default="head")
    s.set_defaults(func=cmd_migrate)
    s = sub.add_parser("stamp", help="Stamp alembic to a revision")
    s.add_argument("--revision", "-r", help="Revision to stamp", default="head")
    s.set_defaults(func=cmd_stamp)
    return p


def main(argv=None):
    p = build_parser()
    args = p.parse_args(argv)
    if not hasattr(args, "func"):
        p.print_help()
        return 2
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
