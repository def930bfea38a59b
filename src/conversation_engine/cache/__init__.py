from .assignment_cache import AssignmentCache, NullAssignmentCache, RedisAssignmentCache, get_assignment_cache

__all__ = ["AssignmentCache", "NullAssignmentCache", "RedisAssignmentCache", "get_assignment_cache"]
