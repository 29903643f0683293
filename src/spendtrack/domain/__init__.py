"""Domain layer for spendtrack application."""

# Services are loaded lazily: the database layer imports domain entities,
# and the services import the database layer.
_SERVICES = {
    "TransactionService": "spendtrack.domain.transaction",
    "ImportService": "spendtrack.domain.csv_import",
    "ImportSessionTracker": "spendtrack.domain.import_session",
    "BatchCommitter": "spendtrack.domain.batch_commit",
    "Deduplicator": "spendtrack.domain.batch_commit",
}

__all__ = list(_SERVICES)


def __getattr__(name):
    if name in _SERVICES:
        from importlib import import_module

        return getattr(import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
