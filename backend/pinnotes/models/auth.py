from pydantic import BaseModel, Field


class PinRequest(BaseModel):
    pin: str = Field(min_length=1, max_length=6)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
