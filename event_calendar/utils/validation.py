from pydantic import ValidationError

from event_calendar.exceptions import RequestValidationError


def validate_request(schema, data):
    """Validate ``data`` against a request schema.

    Returns the schema instance, or raises RequestValidationError whose
    message joins every validation message with ", ".
    """
    try:
        return schema.model_validate(data)
    except ValidationError as e:
        raise RequestValidationError([schema.message_for(error) for error in e.errors()]) from e
