from pydantic import BaseModel, StrictInt, StrictStr


class OrderFields(BaseModel):
    session_id: str
    email: str = ""
    name: str = ""
    line1: str = ""
    line2: str = ""
    city: str = ""
    postal_code: str = ""
    country: str = ""
    phone: str = ""
    items: str = "[]"
    total: int = 0


class CheckoutItem(BaseModel):
    # strict so booleans and numeric strings are rejected instead of coerced
    name: StrictStr
    price: StrictInt
    quantity: StrictInt


class CheckoutRequest(BaseModel):
    items: list[CheckoutItem]


class CheckoutResponse(BaseModel):
    url: str
    session_id: str
