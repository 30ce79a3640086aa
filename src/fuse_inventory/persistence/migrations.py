"""Load-time data migrations.

There is no schema version marker in the data directory, so every
migration here runs on every load and must be idempotent.
"""

from fuse_inventory.models.base import utc_now
from fuse_inventory.models.entities import Application, ApplicationInstance
from fuse_inventory.models.enums import TargetKind
from fuse_inventory.models.snapshot import Snapshot
from fuse_inventory.observability.logging import get_logger

logger = get_logger(__name__)


def migrate_dependency_targets(snapshot: Snapshot) -> Snapshot:
    """Points application dependencies at instances instead of applications.

    Older data files stored the *application* id as the target of an
    Application-kind dependency. Such a target is rewritten to the
    referenced application's instance in the same environment as the
    dependent instance, falling back to its first instance. Applications
    without instances are left as they are.

    Args:
        snapshot: The freshly loaded snapshot.

    Returns:
        The migrated snapshot, or ``snapshot`` itself when nothing changed.
    """
    apps_by_id = {app.id: app for app in snapshot.applications}
    now = utc_now()
    rewritten = 0

    def migrate_instance(inst: ApplicationInstance) -> ApplicationInstance:
        nonlocal rewritten
        deps = []
        changed = False
        for dep in inst.dependencies:
            if dep.target_kind == TargetKind.APPLICATION:
                referenced = apps_by_id.get(dep.target_id)
                target = None
                if referenced is not None:
                    target = next(
                        (
                            i
                            for i in referenced.instances
                            if i.environment_id == inst.environment_id
                        ),
                        referenced.instances[0] if referenced.instances else None,
                    )
                if target is not None and target.id != dep.target_id:
                    deps.append(dep.model_copy(update={"target_id": target.id}))
                    changed = True
                    rewritten += 1
                    continue
            deps.append(dep)
        if not changed:
            return inst
        return inst.model_copy(
            update={"dependencies": tuple(deps), "updated_at": now}
        )

    def migrate_app(app: Application) -> Application:
        instances = tuple(migrate_instance(inst) for inst in app.instances)
        if all(new is old for new, old in zip(instances, app.instances)):
            return app
        return app.model_copy(update={"instances": instances, "updated_at": now})

    applications = tuple(migrate_app(app) for app in snapshot.applications)
    if not rewritten:
        return snapshot

    logger.info(
        "Migrated application dependencies to instance targets",
        extra={"extra_fields": {"rewritten": rewritten}},
    )
    return snapshot.model_copy(update={"applications": applications})
