"""Referential-integrity validation for inventory snapshots.

``validate_snapshot`` is the gatekeeper for every mutation: the store only
publishes a snapshot for which it returns an empty list. It never stops at
the first problem, so a rejected commit reports everything that is wrong
with the candidate at once.
"""

from collections import Counter
from collections.abc import Collection, Iterable
from typing import Callable, TypeVar
from uuid import UUID

from fuse_inventory.models.enums import SecurityRole, TargetKind
from fuse_inventory.models.snapshot import Snapshot


E = TypeVar("E")


def _duplicate_ids(items: Iterable) -> set[UUID]:
    counts = Counter(item.id for item in items)
    return {entity_id for entity_id, n in counts.items() if n > 1}


def _index(
    items: Iterable[E], skip: Collection[UUID] = frozenset()
) -> dict[UUID, E]:
    index: dict[UUID, E] = {}
    for item in items:
        if item.id not in skip:
            index.setdefault(item.id, item)
    return index


def _target_predicate(
    instance_ids: set[UUID],
    data_stores: dict,
    externals: dict,
) -> Callable[[TargetKind, UUID], bool]:
    def target_exists(kind: TargetKind, target_id: UUID) -> bool:
        match kind:
            case TargetKind.APPLICATION:
                return target_id in instance_ids
            case TargetKind.DATA_STORE:
                return target_id in data_stores
            case TargetKind.EXTERNAL:
                return target_id in externals
            case _:
                return False

    return target_exists


def validate_snapshot(snapshot: Snapshot) -> list[str]:
    """Collects every integrity violation in a snapshot.

    Args:
        snapshot: The candidate snapshot.

    Returns:
        A list of human-readable violations; empty when the snapshot is valid.
    """
    errors: list[str] = []

    # Tags are checked first and, when ids repeat, indexed without the
    # repeated ids so the rest of the pass can still run.
    duplicate_tags = _duplicate_ids(snapshot.tags)
    if duplicate_tags:
        errors.append("Duplicate Tag Ids detected")
    tags = _index(snapshot.tags, skip=duplicate_tags)

    for label, collection in (
        ("Environment", snapshot.environments),
        ("Platform", snapshot.platforms),
        ("Application", snapshot.applications),
        ("DataStore", snapshot.data_stores),
        ("ExternalResource", snapshot.external_resources),
        ("Account", snapshot.accounts),
        ("KumaIntegration", snapshot.kuma_integrations),
        ("SecretProvider", snapshot.secret_providers),
        ("SecurityUser", snapshot.security.users),
    ):
        if _duplicate_ids(collection):
            errors.append(f"Duplicate {label} Ids detected")

    envs = _index(snapshot.environments)
    platforms = _index(snapshot.platforms)
    data_stores = _index(snapshot.data_stores)
    externals = _index(snapshot.external_resources)
    instance_ids = {
        inst.id for app in snapshot.applications for inst in app.instances
    }
    target_exists = _target_predicate(instance_ids, data_stores, externals)

    def tags_must_exist(tag_ids: Iterable[UUID], path: str) -> None:
        for tag_id in sorted(tag_ids, key=str):
            if tag_id not in tags:
                errors.append(f"{path}: tag {tag_id} not found")

    for env in snapshot.environments:
        tags_must_exist(env.tag_ids, f"Environment {env.id}")

    for platform in snapshot.platforms:
        tags_must_exist(platform.tag_ids, f"Platform {platform.id}")

    for ds in snapshot.data_stores:
        if ds.environment_id not in envs:
            errors.append(
                f"DataStore {ds.id}: environment {ds.environment_id} not found"
            )
        if ds.platform_id is not None and ds.platform_id not in platforms:
            errors.append(
                f"DataStore {ds.id}: platform {ds.platform_id} not found"
            )
        tags_must_exist(ds.tag_ids, f"DataStore {ds.id}")

    for app in snapshot.applications:
        tags_must_exist(app.tag_ids, f"Application {app.id}")

        for inst in app.instances:
            if inst.environment_id not in envs:
                errors.append(
                    f"ApplicationInstance {inst.id}: environment {inst.environment_id} not found"
                )
            if inst.platform_id is not None and inst.platform_id not in platforms:
                errors.append(
                    f"ApplicationInstance {inst.id}: platform {inst.platform_id} not found"
                )
            tags_must_exist(inst.tag_ids, f"ApplicationInstance {inst.id}")

            for dep in inst.dependencies:
                if not target_exists(dep.target_kind, dep.target_id):
                    errors.append(
                        f"ApplicationInstance {inst.id}: dependency "
                        f"{dep.target_kind.value}/{dep.target_id} not found"
                    )

    for acc in snapshot.accounts:
        if not target_exists(acc.target_kind, acc.target_id):
            errors.append(
                f"Account {acc.id}: target {acc.target_kind.value}/{acc.target_id} not found"
            )
        for grant in acc.grants:
            if not grant.privileges:
                errors.append(
                    f"Account {acc.id}: grant {grant.id} must include at least one privilege"
                )
        tags_must_exist(acc.tag_ids, f"Account {acc.id}")

    for er in snapshot.external_resources:
        tags_must_exist(er.tag_ids, f"ExternalResource {er.id}")

    errors.extend(_validate_security(snapshot))
    return errors


def _validate_security(snapshot: Snapshot) -> list[str]:
    errors: list[str] = []
    users = snapshot.security.users

    if users and not any(u.role == SecurityRole.ADMIN for u in users):
        errors.append("At least one admin user is required for security settings.")

    # Report each duplicated name once, spelled as first seen.
    first_spelling: dict[str, str] = {}
    counts: Counter[str] = Counter()
    for user in users:
        key = user.user_name.casefold()
        first_spelling.setdefault(key, user.user_name)
        counts[key] += 1
    for key, n in counts.items():
        if n > 1:
            errors.append(
                f"Duplicate security user name detected: {first_spelling[key]}"
            )

    if any(not u.user_name.strip() for u in users):
        errors.append("Security user names cannot be empty.")

    if any(
        not u.password_hash.strip() or not u.password_salt.strip() for u in users
    ):
        errors.append("Security user credentials are invalid.")

    return errors
