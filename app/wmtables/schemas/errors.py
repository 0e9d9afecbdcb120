from pydantic import BaseModel


class ApiErrorResponse(BaseModel):
    code: str
    message: str
    details: dict | None = None
    trace_id: str | None = None


class ApiFieldError(BaseModel):
    field: str | None = None
    message: str
    type: str
    loc: list[str | int] = []
    input: object | None = None
    ctx: dict | None = None


class ApiFieldErrors(BaseModel):
    errors: list[ApiFieldError]


class ApiValidationErrorResponse(ApiErrorResponse):
    details: ApiFieldErrors | None = None
