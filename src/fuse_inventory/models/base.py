from datetime import datetime, timezone
from uuid import UUID

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ModelBase(BaseModel):
    """
    Base class for all fuse-inventory models.

    Instances are frozen: a published Snapshot can never be changed in
    place, only replaced. Fields serialize to camelCase keys so the JSON
    data files keep their established layout. Unknown keys in data files
    are dropped on load.
    """

    model_config = ConfigDict(
        extra="ignore",
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


EntityId = UUID

NIL_ID = UUID(int=0)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
