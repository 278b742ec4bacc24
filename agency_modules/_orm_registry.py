"""
Module ORM Registry (``agency_modules._orm_registry``).

Ensures every module-level ORM model is imported so ``Base.metadata``
contains its table before ``create_tables()`` runs.  Scripts and
``tests/conftest.py`` call ``create_all_tables()``.
"""


def import_all_orm_models() -> None:
    """Import every ``agency_modules.*.orm`` module.  Idempotent."""
    # fmt: off
    import agency_modules.packages.orm  # noqa: F401
    import agency_modules.tasks.orm  # noqa: F401
    # fmt: on


def create_all_tables() -> None:
    """Register every module ORM model, then create the full schema."""
    from agency_kernel.db.engine import create_tables

    import_all_orm_models()
    create_tables()
