# ==============================================
# REGISTRY: named connections
# ==============================================
#
# Modules:
# --------
# - schema.py        → config models, defaults, validate_config
# - provisioning.py  → validate → normalize → build → probe → register
# - registry.py      → ConnectionRegistry
#
# ==============================================

from .schema import (
    DEFAULTS,
    MigrationsConfig,
    PoolConfig,
    ProvisionConfig,
    apply_to_defaults,
    merge_with_defaults,
    validate_config
)
from .provisioning import ProvisioningPipeline
from .registry import ConnectionRegistry

__all__ = [
    "DEFAULTS",
    "MigrationsConfig",
    "PoolConfig",
    "ProvisionConfig",
    "apply_to_defaults",
    "merge_with_defaults",
    "validate_config",
    "ProvisioningPipeline",
    "ConnectionRegistry"
]
