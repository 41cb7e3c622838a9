from pydantic import BaseModel, Field, NonNegativeInt, field_validator
from pydantic.config import ConfigDict
from typing import List, Optional


class SignupIn(BaseModel):
    email: str
    password: str
    name: str = Field(default="", max_length=100)


class SigninIn(BaseModel):
    email: str
    password: str


class RequestResetIn(BaseModel):
    email: str


class ResetPasswordIn(BaseModel):
    resetToken: str
    password: str
    confirmPassword: str


class UpdatePermissionsIn(BaseModel):
    userId: int
    permissions: List[str]


class UserRead(BaseModel):
    id: int
    name: str
    email: str
    permissions: List[str]

    model_config = ConfigDict(from_attributes=True)


class MessageOut(BaseModel):
    message: str


class ItemCreate(BaseModel):
    title: str = Field(..., min_length=1)
    price: NonNegativeInt
    description: str = ""
    image: Optional[str] = None
    largeImage: Optional[str] = None

    def fields(self) -> dict:
        data = self.model_dump(exclude={"largeImage"})
        data["large_image"] = self.largeImage
        return data


class ItemUpdate(BaseModel):
    id: int
    title: Optional[str] = None
    price: Optional[NonNegativeInt] = None
    description: Optional[str] = None
    image: Optional[str] = None
    largeImage: Optional[str] = None

    def fields(self) -> dict:
        # only what the client actually sent
        data = self.model_dump(exclude_unset=True, exclude={"id", "largeImage"})
        if "largeImage" in self.model_fields_set:
            data["large_image"] = self.largeImage
        return data


class ItemRead(BaseModel):
    id: int
    title: str
    price: int
    description: str
    image: Optional[str] = None
    large_image: Optional[str] = None
    user_id: int

    model_config = ConfigDict(from_attributes=True)


class IdIn(BaseModel):
    id: int


class CartItemRead(BaseModel):
    id: int
    quantity: int
    user_id: int
    item_id: int

    model_config = ConfigDict(from_attributes=True)


class CreateOrderIn(BaseModel):
    token: str

    @field_validator("token")
    def not_blank(cls, v: str):
        if not v.strip():
            raise ValueError("payment token is required")
        return v


class OrderItemRead(BaseModel):
    id: int
    title: str
    description: str
    image: Optional[str] = None
    large_image: Optional[str] = None
    price: int
    quantity: int

    model_config = ConfigDict(from_attributes=True)


class OrderRead(BaseModel):
    id: int
    user_id: int
    total: int
    charge: str
    created_at: int
    items: List[OrderItemRead] = []

    model_config = ConfigDict(from_attributes=True)
