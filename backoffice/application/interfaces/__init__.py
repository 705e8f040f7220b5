from backoffice.application.interfaces.repositories import (
    AssignmentStore,
    AuditSink,
    DenialSink,
    VersionedStore,
)

__all__ = ["AssignmentStore", "AuditSink", "DenialSink", "VersionedStore"]
