"""
Database migrations for the Supabase key-value table.
"""
from pathlib import Path

# Migrations directory
MIGRATIONS_DIR = Path(__file__).parent / 'versions'

def get_migration_files():
    """Get all migration modules in order."""
    return sorted(
        [f for f in MIGRATIONS_DIR.glob('*.py') if f.is_file() and not f.name.startswith('_')],
        key=lambda x: x.stem
    )
