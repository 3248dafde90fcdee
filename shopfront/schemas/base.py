"""Base schemas shared by the API resources"""

from decimal import Decimal
from typing import Any
from typing_extensions import Annotated
from pydantic import BaseModel, ConfigDict, PlainSerializer

# Decimal amounts go out as JSON numbers
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]

class BaseSchema(BaseModel):
    """Base schema with common configuration"""

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

def success_response(data: Any = None, message: str = "Success") -> dict:
    return {"status": "success", "message": message, "data": data}
