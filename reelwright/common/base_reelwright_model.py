from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class BaseReelwrightModel(BaseModel):
    """Base for every Reelwright schema.

    Instances are immutable and revalidated when nested. Field names stay
    snake_case in Python and serialize to camelCase, which is the key style
    of the persisted timeline document.
    """

    model_config = ConfigDict(
        frozen=True,
        revalidate_instances="always",
        validate_assignment=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )
