# portal/schemas/common.py
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


# ------------------------------------------------------------
# Base for request/response bodies (camelCase on the wire)
# ------------------------------------------------------------
class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


def require_fields(body: BaseModel, fields: list[str]) -> list[str]:
    """Names (wire aliases) of fields that are missing or empty."""
    missing = []
    for name in fields:
        value = getattr(body, name)
        if value is None or (isinstance(value, str) and not value.strip()):
            field = type(body).model_fields[name]
            missing.append(field.alias or name)
    return missing
