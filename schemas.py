"""
Database Schemas

Pydantic models describing the documents in each MongoDB collection and the
shapes the API sends back. Incoming entity payloads are checked by the rule
tables in validators.py; these models document and serialize them.

- Product  -> "products"
- Supplier -> "suppliers"
- User     -> "users"
"""

from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"


SupplierType = Literal["manufacturer", "wholesaler", "distributor", "retailer"]


class FieldError(BaseModel):
    field: str
    message: str


class Dimensions(BaseModel):
    height: Optional[float] = None
    width: Optional[float] = None
    depth: Optional[float] = None
    unit: Optional[str] = None


class Product(BaseModel):
    """
    Products collection schema
    Collection name: "products"
    """
    model_config = ConfigDict(extra="allow")

    id: str = Field(..., description="Store-assigned identifier")
    name: Optional[str] = Field(None, description="Product name")
    description: Optional[str] = Field(None, description="Detailed product description")
    price: Optional[float] = Field(None, description="Product price")
    discountPercentage: Optional[float] = Field(None, description="Discount percentage, if any")
    stock: Optional[int] = Field(None, description="Available quantity in stock")
    category: Optional[str] = None
    tags: Optional[List[str]] = None
    dimensions: Optional[Dimensions] = None
    weight: Optional[float] = Field(None, description="Weight in kg")
    supplierId: Optional[str] = Field(None, description="Referenced supplier id")
    isAvailable: Optional[bool] = Field(None, description="Whether the product can be purchased")
    imageUrl: Optional[str] = None
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None


class Address(BaseModel):
    street: str
    city: str
    state: str
    zipCode: str


class Supplier(BaseModel):
    """
    Suppliers collection schema
    Collection name: "suppliers"
    """
    model_config = ConfigDict(extra="allow")

    id: str
    name: Optional[str] = Field(None, description="Company name")
    contactName: Optional[str] = Field(None, description="Primary contact person")
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[Address] = None
    country: Optional[str] = None
    supplierType: Optional[SupplierType] = None
    paymentTerms: Optional[str] = Field(None, description="e.g. Net 30")
    isActive: Optional[bool] = None
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None


class User(BaseModel):
    """
    Users collection schema (as returned to callers, never with a password)
    Collection name: "users"
    """
    id: str
    name: str
    email: str
    githubId: Optional[str] = None
    avatar: Optional[str] = None
    roles: List[Role] = Field(default_factory=lambda: [Role.USER])
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class AuthResponse(BaseModel):
    message: str
    user: User
    token: str


class Profile(BaseModel):
    """Identity returned by the OAuth provider after a successful handshake."""
    provider_id: str
    display_name: Optional[str] = None
    username: Optional[str] = None
    emails: List[str] = Field(default_factory=list)
    photos: List[str] = Field(default_factory=list)
