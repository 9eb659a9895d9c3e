# backend/app/dependencies.py
"""
Dependency injection module for FastAPI services.

This module provides singleton service instances that are shared across
all requests. The services hold no per-request state (sessions are passed
in per call), so one instance of each is enough.

Services are lazily initialized on first use to avoid import-time side effects.

Usage in routers:
    from app.dependencies import get_bulk_import_service

    @router.post("/upload")
    def upload(
        service: BulkImportService = Depends(get_bulk_import_service),
    ):
        ...

Tests replace them through app.dependency_overrides.
"""

import logging
from functools import lru_cache

from app.services.account_provisioning import AccountProvisioningService
from app.services.authorization_scope import AuthorizationScopeService
from app.services.export import ExportProjector
from app.services.identity_resolution import IdentityResolutionService
from app.services.reconciliation import BulkImportService, ModuleImportService

logger = logging.getLogger(__name__)


# =============================================================================
# SINGLETON SERVICE INSTANCES
# =============================================================================
# Using @lru_cache ensures the function returns the same instance on every call
#
# Order matters: define dependencies before dependents
# 1. get_account_provisioner, get_authorization_scope (no deps)
# 2. get_identity_resolver (depends on provisioner)
# 3. get_bulk_import_service, get_module_import_service (depend on resolver)


@lru_cache(maxsize=1)
def get_account_provisioner() -> AccountProvisioningService:
    logger.debug("Initializing singleton AccountProvisioningService")
    return AccountProvisioningService()


@lru_cache(maxsize=1)
def get_authorization_scope() -> AuthorizationScopeService:
    logger.debug("Initializing singleton AuthorizationScopeService")
    return AuthorizationScopeService()


@lru_cache(maxsize=1)
def get_identity_resolver() -> IdentityResolutionService:
    """
    Get the singleton IdentityResolutionService instance.

    Uses the shared provisioner so every created intern gets an account.
    """
    logger.debug("Initializing singleton IdentityResolutionService")
    return IdentityResolutionService(provisioner=get_account_provisioner())


@lru_cache(maxsize=1)
def get_bulk_import_service() -> BulkImportService:
    """Get the singleton BulkImportService instance."""
    logger.debug("Initializing singleton BulkImportService")
    return BulkImportService(resolver=get_identity_resolver())


@lru_cache(maxsize=1)
def get_module_import_service() -> ModuleImportService:
    """Get the singleton ModuleImportService instance."""
    logger.debug("Initializing singleton ModuleImportService")
    return ModuleImportService(
        resolver=get_identity_resolver(),
        scope=get_authorization_scope(),
    )


@lru_cache(maxsize=1)
def get_export_projector() -> ExportProjector:
    logger.debug("Initializing singleton ExportProjector")
    return ExportProjector()
