"""
Service layer for vcsorigin.

Contains the logic that ties origins, configuration and policies
together for callers such as the CLI or a migration workflow.
"""

from .origin_service import (
    MigrationPlan,
    authoring_from_config,
    create_origin,
    last_migrated_revision,
    plan_migration,
)

__all__ = [
    'MigrationPlan',
    'authoring_from_config',
    'create_origin',
    'last_migrated_revision',
    'plan_migration',
]
