from collections.abc import Mapping

from registry.exceptions import ValidationError


def json_object(request) -> Mapping:
    """Return the request body, which must be a JSON object."""
    data = request.data
    if not isinstance(data, Mapping):
        raise ValidationError('Request body must be a JSON object')
    return data
