"""FastAPI application wiring for fuse-inventory."""

from typing import Optional

from fastapi import FastAPI

from fuse_inventory.api.endpoints import build_security_router
from fuse_inventory.api.middleware import SecurityMiddleware
from fuse_inventory.config import FuseSettings
from fuse_inventory.observability.audit import JsonlAuditLogger
from fuse_inventory.persistence.json_store import JsonSnapshotStore
from fuse_inventory.persistence.store import SnapshotStore
from fuse_inventory.security.service import SecurityService


def create_app(
    settings: Optional[FuseSettings] = None,
    store: Optional[SnapshotStore] = None,
) -> FastAPI:
    """Builds the application around one store and one security service.

    The store is loaded eagerly so that an inconsistent data directory
    stops the process at startup instead of on the first request.

    Args:
        settings: Runtime settings. Defaults to FuseSettings.from_env().
        store: Snapshot store. Defaults to a JsonSnapshotStore on settings.data_dir.

    Raises:
        StoreLoadError: If the stored data fails validation.
    """
    settings = settings or FuseSettings.from_env()
    store = store or JsonSnapshotStore(settings.data_dir)
    store.get()

    service = SecurityService(store, session_lifetime=settings.session_lifetime)
    audit = JsonlAuditLogger(settings.audit_path)

    app = FastAPI(title="fuse-inventory")
    app.state.settings = settings
    app.state.store = store
    app.state.security = service
    app.state.audit = audit

    app.add_middleware(SecurityMiddleware, service=service)
    app.include_router(build_security_router(service, audit))

    @app.get("/api/inventory/summary")
    def inventory_summary():
        snapshot = store.get()
        return {
            "applications": len(snapshot.applications),
            "instances": sum(len(a.instances) for a in snapshot.applications),
            "dataStores": len(snapshot.data_stores),
            "platforms": len(snapshot.platforms),
            "externalResources": len(snapshot.external_resources),
            "accounts": len(snapshot.accounts),
            "tags": len(snapshot.tags),
            "environments": len(snapshot.environments),
        }

    return app
