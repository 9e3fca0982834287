"""
Capability service.

Answers read/write/create/delete permission questions for a table or a
single column. Stores consult an evaluator for every capability check and,
for secure (row-level-secured) handles, before reading or persisting rows.

Two evaluators are provided:
- AllowAllCapabilities: permits everything (default for trusted code)
- RoleBasedCapabilities: access rules matched against the user's roles,
  expanded through the contained-role hierarchy
"""

import logging
from enum import Enum
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional, Protocol, Set

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from safe_record.auth.tokens import TokenClaims

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"
ANY_FIELD = "*"


class Operation(str, Enum):
    """Operations a capability check can ask about."""
    READ = "read"
    WRITE = "write"
    CREATE = "create"
    DELETE = "delete"


class CapabilityEvaluator(Protocol):
    """Boolean permission service consumed by the record stores."""

    def is_permitted(
        self,
        operation: Operation,
        table: str,
        field: Optional[str] = None
    ) -> bool:
        ...


class AllowAllCapabilities:
    """Evaluator that permits every operation."""

    def is_permitted(
        self,
        operation: Operation,
        table: str,
        field: Optional[str] = None
    ) -> bool:
        return True


class AccessRule(BaseModel):
    """
    A single access rule.

    A rule without a field applies to the row as a whole; field "*" applies
    to every column of the table that has no rule of its own.
    """
    table: str = Field(..., min_length=1, description="Table the rule protects")
    field: Optional[str] = Field(None, description="Column name, '*' or None for the row")
    operation: Operation = Field(..., description="Operation the rule protects")
    roles: List[str] = Field(default_factory=list, description="Roles granting access")
    active: bool = Field(True, description="Inactive rules are ignored")
    name: Optional[str] = Field(None, description="Optional rule name for audits")

    @property
    def display_name(self) -> str:
        if self.name:
            return self.name
        target = self.table if self.field is None else f"{self.table}.{self.field}"
        return f"{target}:{self.operation.value}"


def expand_contained_roles(
    roles: Iterable[str],
    role_hierarchy: Dict[str, List[str]]
) -> Set[str]:
    """
    Expand roles with every role they contain, transitively.

    Args:
        roles: Roles granted directly
        role_hierarchy: Map of role name -> directly contained role names

    Returns:
        The granted roles plus all contained roles. Cycles in the hierarchy
        are tolerated.
    """
    expanded: Set[str] = set()
    pending = list(roles)

    while pending:
        role = pending.pop()
        if role in expanded:
            continue
        expanded.add(role)
        pending.extend(role_hierarchy.get(role, []))

    return expanded


def find_rules_with_additional_roles(
    rules: Iterable[AccessRule],
    baseline_roles: Iterable[str]
) -> Dict[str, List[str]]:
    """
    Find active rules that grant to a baseline role but also list other roles.

    Such rules are effectively open to anyone holding a baseline role, which
    makes the additional roles meaningless. Useful for access audits.

    Args:
        rules: Rules to inspect
        baseline_roles: Broad roles (e.g. every authenticated user)

    Returns:
        Map of rule display name -> additional role names, in rule order
    """
    baseline = set(baseline_roles)
    findings: Dict[str, List[str]] = {}

    for rule in rules:
        if not rule.active or not baseline.intersection(rule.roles):
            continue

        additional: List[str] = []
        for role in rule.roles:
            if role not in baseline and role not in additional:
                additional.append(role)

        if additional:
            findings[rule.display_name] = additional

    return findings


class RoleBasedCapabilities:
    """
    Evaluate access rules against a user's roles.

    Matching order for a field check is table.field, then table.*, then the
    row rule; the first tier that holds any active rule decides. A check is
    permitted when one rule of the deciding tier shares a role with the user.
    No rule at all means denied. The admin role is permitted everything.
    """

    def __init__(
        self,
        rules: Iterable[AccessRule],
        user_roles: Iterable[str],
        role_hierarchy: Optional[Dict[str, List[str]]] = None
    ):
        self._rules = [rule for rule in rules if rule.active]
        self._roles = expand_contained_roles(user_roles, role_hierarchy or {})

    @classmethod
    def for_claims(
        cls,
        claims: "TokenClaims",
        rules: Iterable[AccessRule],
        role_hierarchy: Optional[Dict[str, List[str]]] = None
    ) -> "RoleBasedCapabilities":
        """Build an evaluator for a verified access token."""
        logger.debug(f"Building capabilities for user {claims.user_id} with roles {claims.roles}")
        return cls(rules, claims.roles, role_hierarchy)

    @property
    def roles(self) -> Set[str]:
        return set(self._roles)

    def _matching(
        self,
        operation: Operation,
        table: str,
        field: Optional[str]
    ) -> List[AccessRule]:
        return [
            rule for rule in self._rules
            if rule.operation == operation and rule.table == table and rule.field == field
        ]

    def is_permitted(
        self,
        operation: Operation,
        table: str,
        field: Optional[str] = None
    ) -> bool:
        if ADMIN_ROLE in self._roles:
            return True

        tiers = [None] if field is None else [field, ANY_FIELD, None]

        for tier in tiers:
            rules = self._matching(operation, table, tier)
            if rules:
                permitted = any(self._roles.intersection(rule.roles) for rule in rules)
                if not permitted:
                    logger.debug(
                        f"Denied {operation.value} on {table}"
                        f"{'.' + field if field else ''} for roles {sorted(self._roles)}"
                    )
                return permitted

        logger.debug(f"No access rule for {operation.value} on {table}; denying")
        return False

