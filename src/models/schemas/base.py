import datetime
import typing

import pydantic

from src.utilities.formatters.datetime_formatter import format_datetime_into_isoformat
from src.utilities.formatters.field_formatter import format_dict_key_to_camel_case


class BaseSchemaModel(pydantic.BaseModel):
    """camelCase on the wire, snake_case in Python; validates straight from ORM rows."""

    model_config = pydantic.ConfigDict(
        from_attributes=True,
        validate_assignment=True,
        populate_by_name=True,
        alias_generator=format_dict_key_to_camel_case,
    )

    @pydantic.field_serializer("*", mode="wrap", when_used="json", check_fields=False)
    def _serialize_utc_datetimes(self, value: typing.Any, handler: pydantic.SerializerFunctionWrapHandler) -> typing.Any:
        if isinstance(value, datetime.datetime):
            return format_datetime_into_isoformat(value)
        return handler(value)
