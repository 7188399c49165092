"""
Migration runner script.
Uses DATABASE_URL from environment variables.
"""
import os
import sys
from dotenv import load_dotenv

from shoptrail.db.migrations import MIGRATIONS_DIR

COMMANDS = {
    'apply': ['apply'],
    'rollback': ['rollback'],
    'list': ['list'],
    'reapply': ['rollback', 'apply'],
}

def run_yoyo(command: str, database_url: str) -> int:
    """Run a yoyo command."""
    full_command = f"yoyo {command} --database {database_url} {MIGRATIONS_DIR}"
    return os.system(full_command)

def main(argv=None) -> int:
    """Main entry point."""
    load_dotenv()
    argv = sys.argv[1:] if argv is None else argv

    database_url = os.getenv('DATABASE_URL')
    if not database_url:
        print("Error: DATABASE_URL not found in environment variables")
        return 1

    if not argv or argv[0] not in COMMANDS:
        if argv:
            print(f"Unknown command: {argv[0]}")
        print("Usage:")
        print("  python -m shoptrail.db.migrations.migrate <command>")
        print("\nAvailable commands:")
        print("  apply     - Apply pending migrations")
        print("  rollback  - Rollback last migration")
        print("  list      - List migration status")
        print("  reapply   - Rollback and reapply last migration")
        return 1

    for command in COMMANDS[argv[0]]:
        status = run_yoyo(command, database_url)
        if status != 0:
            return status
    return 0

if __name__ == '__main__':
    sys.exit(main())
