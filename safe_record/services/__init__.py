"""
Service layer for safe_record.

Contains the collaborators the record stores consult:
- capability evaluation (read/write/create/delete per table or field)
"""

from .capability_service import (
    AccessRule,
    AllowAllCapabilities,
    CapabilityEvaluator,
    Operation,
    RoleBasedCapabilities,
    expand_contained_roles,
    find_rules_with_additional_roles,
)

__all__ = [
    "AccessRule",
    "AllowAllCapabilities",
    "CapabilityEvaluator",
    "Operation",
    "RoleBasedCapabilities",
    "expand_contained_roles",
    "find_rules_with_additional_roles",
]
