from decimal import Decimal

from pydantic import BaseModel, EmailStr, Field, field_validator


class DonationCreate(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    email: EmailStr | None = None
    amount: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    message: str | None = Field(default=None, max_length=500)
    is_public: bool = True

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Informe um nome.")
        return v


class DonationResponse(BaseModel):
    id: int
    name: str
    amount: Decimal
    is_public: bool


class LeaderboardEntry(BaseModel):
    name: str
    total: Decimal
    donations: int
