"""Request parameter extraction shared by the API routes."""

from typing import Any

from fastapi import Request

from backend.app.handlers.validation import InvalidParameter

FORM_CONTENT_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


async def read_params(request: Request) -> dict[str, Any]:
    """Merge query parameters with a JSON or form body.

    Body values win over query values. Form keys written Rails-style
    (``document_ids[]``) are normalized and always yield lists; repeated
    keys yield lists.

    Raises:
        InvalidParameter: If a JSON body is malformed or not an object
    """
    params: dict[str, Any] = dict(request.query_params)
    content_type = request.headers.get("content-type", "")

    if content_type.startswith("application/json"):
        try:
            body = await request.json()
        except ValueError as e:
            raise InvalidParameter("Request body is not valid JSON") from e

        if not isinstance(body, dict):
            raise InvalidParameter("Request body must be a JSON object")

        params.update(body)

    elif content_type.startswith(FORM_CONTENT_TYPES):
        form = await request.form()
        for key in form.keys():
            values = form.getlist(key)
            if key.endswith("[]"):
                params[key[:-2]] = list(values)
            else:
                params[key] = values[0] if len(values) == 1 else list(values)

    return params
