"""Example of the snapshot store refusing an inconsistent commit.

A data store pointing at an environment that does not exist is rejected
with every violation listed, and the data directory is left as it was.
"""

import tempfile
import uuid

from fuse_inventory.errors import SnapshotValidationError
from fuse_inventory.models.entities import DataStore, EnvironmentInfo, Tag
from fuse_inventory.persistence.json_store import JsonSnapshotStore


def run_example():
    with tempfile.TemporaryDirectory() as data_dir:
        store = JsonSnapshotStore(data_dir)

        tag = Tag(id=uuid.uuid4(), name="prod")
        env = EnvironmentInfo(id=uuid.uuid4(), name="production", tag_ids={tag.id})
        store.update(
            lambda s: s.model_copy(update={"tags": (tag,), "environments": (env,)})
        )
        print(f"Committed 1 tag and 1 environment to {data_dir}")

        orphan = DataStore(
            id=uuid.uuid4(),
            name="orders-db",
            kind="postgres",
            environment_id=uuid.uuid4(),
            tag_ids={uuid.uuid4()},
        )
        try:
            store.update(
                lambda s: s.model_copy(update={"data_stores": s.data_stores + (orphan,)})
            )
        except SnapshotValidationError as e:
            print("Commit rejected:")
            for error in e.errors:
                print(f"  - {error}")

        reloaded = JsonSnapshotStore(data_dir).load()
        print(f"Data stores on disk after rejection: {len(reloaded.data_stores)}")


if __name__ == "__main__":
    run_example()
