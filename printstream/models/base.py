"""Base des schémas de réponse: champs snake_case côté Python, camelCase sur le fil."""
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)


class MessageResponse(CamelModel):
    message: str
