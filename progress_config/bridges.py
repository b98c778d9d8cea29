"""
Config -> Kernel Bridges.

Functions that convert configuration artifacts into kernel inputs.  They
live here because the kernel must never import progress_config.

Usage:
    from progress_config import get_settings
    from progress_config.bridges import build_access_policy

    settings = get_settings()
    policy = build_access_policy(settings)
    bind_access_policy(session, policy, actor_id="mgr-1")
"""

from __future__ import annotations

from progress_config.schema import AccessRuleDef, EngineSettings
from progress_kernel.db.access_control import AccessRule, RuleAccessPolicy
from progress_kernel.domain.values import StorageOperation


def _operations(rule: AccessRuleDef) -> frozenset[StorageOperation]:
    ops: set[StorageOperation] = set()
    for name in rule.operations:
        if name == StorageOperation.WRITE.value:
            ops.update({StorageOperation.CREATE, StorageOperation.UPDATE})
        ops.add(StorageOperation(name))
    return frozenset(ops)


def build_access_rule(rule: AccessRuleDef) -> AccessRule:
    return AccessRule(
        path_pattern=rule.path,
        operations=_operations(rule),
        allow=rule.allow,
        actor_ids=frozenset(rule.actors),
    )


def build_access_policy(settings: EngineSettings) -> RuleAccessPolicy:
    """Translate configured access rules into a kernel RuleAccessPolicy."""
    return RuleAccessPolicy(
        [build_access_rule(r) for r in settings.access_rules],
        default_allow=settings.default_allow,
    )
