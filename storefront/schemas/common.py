from pydantic import BaseModel, ConfigDict


class Pagination(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={"example": {"page": 1, "limit": 12, "total": 11, "pages": 1}}
    )

    page: int
    limit: int
    total: int
    pages: int


class PaginatedResponse[T](BaseModel):
    data: list[T]
    pagination: Pagination


class MessageResponse(BaseModel):
    message: str


class ErrorDetail(BaseModel):
    field: str
    message: str


class ErrorCode(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "code": "FORBIDDEN",
                "message": "Access denied. Admin only.",
                "details": None,
            }
        }
    )

    code: str
    message: str
    details: list[ErrorDetail] | None = None


class ErrorResponse(BaseModel):
    error: ErrorCode
