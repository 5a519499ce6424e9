from .expressions import RenderedUpdate, UpdateExpression
from .requests import GetRequest, PutRequest, ReturnValues, UpdateRequest

__all__ = [
    # Expressions
    "RenderedUpdate",
    "UpdateExpression",

    # Builder outputs
    "GetRequest",
    "PutRequest",
    "UpdateRequest",
    "ReturnValues",
]
