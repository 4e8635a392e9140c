from mindreel.migrations.runner import (
    MigrationRunner,
    MigrationScript,
    load_migrations,
    validate_sequence,
)

__all__ = [
    "MigrationRunner",
    "MigrationScript",
    "load_migrations",
    "validate_sequence",
]
