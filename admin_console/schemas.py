"""
Wire schemas for the admin REST API

Each Pydantic model mirrors one resource the console reads from the backend.
Field names are snake_case in Python and camelCase on the wire; identifiers
travel as "_id".

Resources:
- product
- brand
- category
- order
- store settings (singleton)
- dashboard summary
"""
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .config import CURRENCY, LOW_STOCK_THRESHOLD

ORDER_STATUSES = ("pending", "processing", "shipped", "delivered", "cancelled")
OrderStatus = Literal["pending", "processing", "shipped", "delivered", "cancelled"]

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def to_wire(self, **kwargs) -> dict:
        return self.model_dump(mode="json", by_alias=True, **kwargs)


class Document(WireModel):
    id: str = Field(..., alias="_id", description="Backend identifier")


class ProductSize(WireModel):
    size: int = Field(..., description="Shoe size")
    stock: int = Field(0, ge=0, description="Units in stock for this size")

    @property
    def is_low(self) -> bool:
        return self.stock < LOW_STOCK_THRESHOLD


class Product(Document):
    """
    Products collection schema
    """
    name: str = Field(..., description="Product name")
    brand: str = Field(..., description="Brand name")
    price: float = Field(..., ge=0, description="Price in INR")
    discounted_price: Optional[float] = Field(None, ge=0, description="Sale price, not checked against price")
    category: str = Field(..., description="Category name")
    images: List[str] = Field(default_factory=list, description="Image URLs")
    description: str = Field("", description="Free-text description")
    sizes: List[ProductSize] = Field(default_factory=list)
    featured: bool = Field(False, description="Shown on the storefront home view")

    @property
    def total_stock(self) -> int:
        return sum(s.stock for s in self.sizes)

    def low_stock_sizes(self) -> List[ProductSize]:
        return [s for s in self.sizes if s.is_low]


class Pagination(WireModel):
    current_page: int = 1
    total_pages: int = 1
    total_products: int = 0
    has_next: bool = False
    has_prev: bool = False


class ProductPage(WireModel):
    products: List[Product] = Field(default_factory=list)
    # None while results come from a search batch
    pagination: Optional[Pagination] = None


class Brand(Document):
    """
    Brands collection schema
    """
    name: str
    slug: Optional[str] = None
    description: str = ""
    logo: Optional[str] = Field(None, description="Stored logo URL")
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Category(Document):
    """
    Categories collection schema
    """
    name: str
    description: str = ""
    image: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class OrderUser(WireModel):
    name: str
    email: str


class OrderItem(WireModel):
    product: Optional[str] = Field(None, description="Product id")
    name: Optional[str] = None
    size: Optional[int] = None
    quantity: int = Field(1, ge=1)
    price: float


class ShippingAddress(WireModel):
    street: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    country: str = ""


class Order(Document):
    """
    Orders collection schema
    """
    user: OrderUser
    items: List[OrderItem] = Field(default_factory=list)
    total_price: float
    shipping_price: float = 0
    shipping_address: Optional[ShippingAddress] = None
    payment_method: Optional[str] = None
    status: OrderStatus = "pending"
    created_at: Optional[datetime] = None

    @property
    def subtotal(self) -> float:
        return self.total_price - (self.shipping_price or 0)


class ContactEmail(WireModel):
    email: str = ""
    label: str = "General"
    is_active: bool = True


class PhoneNumber(WireModel):
    number: str = ""
    label: str = "General"
    is_active: bool = True


class Address(WireModel):
    street: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    country: str = "India"
    label: str = "Main Office"
    is_active: bool = True


class SocialMedia(WireModel):
    facebook: Optional[str] = None
    instagram: Optional[str] = None
    twitter: Optional[str] = None
    linkedin: Optional[str] = None


class DayHours(WireModel):
    open: str = "10:00"
    close: str = "20:00"
    is_open: bool = True


class BusinessHours(WireModel):
    monday: DayHours = Field(default_factory=DayHours)
    tuesday: DayHours = Field(default_factory=DayHours)
    wednesday: DayHours = Field(default_factory=DayHours)
    thursday: DayHours = Field(default_factory=DayHours)
    friday: DayHours = Field(default_factory=DayHours)
    saturday: DayHours = Field(default_factory=DayHours)
    sunday: DayHours = Field(default_factory=lambda: DayHours(is_open=False))


class ShippingSettings(WireModel):
    free_shipping_threshold: float = 0
    default_shipping_cost: float = 0


class TaxSettings(WireModel):
    gst_percentage: float = 0
    is_tax_inclusive: bool = True


class StoreSettings(WireModel):
    """
    Store settings singleton
    """
    id: Optional[str] = Field(None, alias="_id")
    store_name: str = ""
    contact_emails: List[ContactEmail] = Field(default_factory=list)
    phone_numbers: List[PhoneNumber] = Field(default_factory=list)
    addresses: List[Address] = Field(default_factory=list)
    about_store: str = ""
    social_media: SocialMedia = Field(default_factory=SocialMedia)
    business_hours: BusinessHours = Field(default_factory=BusinessHours)
    shipping_settings: ShippingSettings = Field(default_factory=ShippingSettings)
    tax_settings: TaxSettings = Field(default_factory=TaxSettings)
    currency: str = CURRENCY
    is_active: bool = True


class DashboardStats(WireModel):
    total_users: int = 0
    total_products: int = 0
    total_orders: int = 0
    pending_orders: int = 0
    total_revenue: float = 0


class RecentOrder(Document):
    user: OrderUser
    total_price: float
    status: OrderStatus
    created_at: Optional[datetime] = None


class LowStockProduct(Document):
    name: str
    sizes: List[ProductSize] = Field(default_factory=list)

    def low_stock_sizes(self) -> List[ProductSize]:
        return [s for s in self.sizes if s.is_low]


class DashboardSummary(WireModel):
    """Stats, recent orders and low-stock products from one backend snapshot."""
    stats: DashboardStats = Field(default_factory=DashboardStats)
    recent_orders: List[RecentOrder] = Field(default_factory=list)
    low_stock_products: List[LowStockProduct] = Field(default_factory=list)


class AdminUser(WireModel):
    id: str = Field(..., alias="_id")
    name: str
    email: str
    is_admin: bool = False


class LoginResult(WireModel):
    token: str
    user: AdminUser
