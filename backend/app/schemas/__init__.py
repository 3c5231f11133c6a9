"""
Pydantic v2 request/response schemas, one module per resource.

Request bodies use snake_case field names. Patch bodies ("...Update") have
all-optional fields and are applied with model_dump(exclude_unset=True), so
an omitted field is left alone while an explicit null clears a nullable one.
"""
