"""
agency_services -- Stateful services shared by the agency modules.

Document store, payment alert emitter and package selectors.
"""

from agency_services.alerts import PaymentAlertEmitter
from agency_services.selectors import LineItemRef, MilestoneSummary, PackageSelector
from agency_services.store import DocumentStore, SqlAlchemyDocumentStore

__all__ = [
    "DocumentStore",
    "LineItemRef",
    "MilestoneSummary",
    "PackageSelector",
    "PaymentAlertEmitter",
    "SqlAlchemyDocumentStore",
]
