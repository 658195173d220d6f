"""Review listing, editing and rating statistics."""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ReviewListParams(BaseModel):
    page: int = Field(1, ge=1)
    limit: int = Field(10, ge=1, le=100)
    rating: int | None = Field(None, ge=1, le=5)


class ReviewUpdate(BaseModel):
    rating: int | None = Field(None, ge=1, le=5)
    title: str | None = Field(None, max_length=200)
    comment: str | None = None

    @field_validator("rating")
    @classmethod
    def reject_null(cls, v: int | None) -> int:
        if v is None:
            raise ValueError("Field may be omitted but not null")
        return v


class ReviewStatsResponse(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "total_reviews": 4,
                "average_rating": 4.3,
                "rating_distribution": {"1": 0, "2": 0, "3": 1, "4": 1, "5": 2},
            }
        }
    )

    total_reviews: int
    average_rating: float
    rating_distribution: dict[int, int]
