from .reassignment import MAX_CONTACTS_PER_UPDATE, ReassignmentService, is_unassign

__all__ = ["MAX_CONTACTS_PER_UPDATE", "ReassignmentService", "is_unassign"]
