from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for payloads exchanged with browser callers, which speak camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ErrorResponse(BaseModel):
    error: str
    message: str


class ReadinessResponse(BaseModel):
    clickup_configured: bool
    archive_table: str
    default_list_id: str | None = None
