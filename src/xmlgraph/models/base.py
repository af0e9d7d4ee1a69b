#!/usr/bin/env python3

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model whose JSON form uses camelCase keys.

    Both camelCase and snake_case names are accepted on input so configs
    exported by the UI and configs written by hand load the same way.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict[str, Any]:
        """Dump to plain JSON-compatible data with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
