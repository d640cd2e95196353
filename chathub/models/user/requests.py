from pydantic import BaseModel, Field


class RegisterUserRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=50, description="Display name")
    email: str = Field(
        ...,
        pattern=r"^\S+@\S+\.\S+$",
        max_length=254,
        description="Email address, unique per user",
    )
