"""
Partial-update expressions.

An UpdateExpression is a set of attribute assignments plus an optional
last-updated attribute. Rendering turns it into DynamoDB's
``SET #a0 = :v0, ...`` form with placeholder maps, so attribute names that
collide with reserved words (``status``, ``name``, ``value``) are safe.
"""

from typing import Any, Dict, Mapping, NamedTuple, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError as PydanticValidationError

from ..exceptions import ValidationError
from ..utils import serialize_value, utc_now_iso


class RenderedUpdate(NamedTuple):
    update_expression: str
    expression_attribute_names: Dict[str, str]
    expression_attribute_values: Dict[str, Any]


class UpdateExpression(BaseModel):
    """Attribute assignments applied by one UpdateItem call.

    If ``timestamp_attribute`` is set and not assigned explicitly, it receives
    the current UTC time when the expression is rendered, in the same call as
    the other assignments.
    """

    assignments: Dict[str, Any] = Field(default_factory=dict, description="Attribute name to new value")
    timestamp_attribute: Optional[str] = Field(None, min_length=1, description="Attribute stamped with the update time")

    model_config = ConfigDict(frozen=True)

    @classmethod
    def of(cls, assignments: Mapping[str, Any], timestamp_attribute: Optional[str] = None) -> "UpdateExpression":
        """Build an expression, reporting bad input as ValidationError."""
        bad_names = [name for name in assignments if not isinstance(name, str) or not name]
        if bad_names:
            raise ValidationError(f"Attribute names must be non-empty strings: {bad_names!r}")
        try:
            return cls(assignments=dict(assignments), timestamp_attribute=timestamp_attribute)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid update expression: {e}", original_error=e) from e

    @property
    def attribute_names(self):
        names = set(self.assignments)
        if self.timestamp_attribute:
            names.add(self.timestamp_attribute)
        return names

    def render(self, primary_key: Optional[str] = None, now: Optional[str] = None) -> RenderedUpdate:
        """Render to UpdateExpression / ExpressionAttributeNames / ExpressionAttributeValues.

        Args:
            primary_key: Key attribute of the target table; assigning it is rejected
            now: Timestamp override, defaults to utc_now_iso()

        Raises:
            ValidationError: nothing to update, the key attribute is assigned, or a
                value cannot be stored
        """
        if not self.assignments and not self.timestamp_attribute:
            raise ValidationError("Update expression has no assignments")
        if primary_key is not None and primary_key in self.attribute_names:
            raise ValidationError(
                f"Update expression must not assign primary key attribute '{primary_key}'",
                context={'attribute': primary_key},
            )

        clauses = []
        names: Dict[str, str] = {}
        values: Dict[str, Any] = {}
        for i, (name, value) in enumerate(self.assignments.items()):
            names[f"#a{i}"] = name
            try:
                values[f":v{i}"] = serialize_value(value)
            except ValidationError as e:
                raise ValidationError(f"Attribute '{name}': {e.message}", context={'attribute': name}) from e
            clauses.append(f"#a{i} = :v{i}")

        if self.timestamp_attribute and self.timestamp_attribute not in self.assignments:
            names["#ts"] = self.timestamp_attribute
            values[":ts"] = now or utc_now_iso()
            clauses.append("#ts = :ts")

        return RenderedUpdate("SET " + ", ".join(clauses), names, values)
