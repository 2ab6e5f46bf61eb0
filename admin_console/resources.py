"""
Endpoint wrappers, one group per backend resource.

Groups are reached through an ApiClient instance (client.products,
client.brands, ...) and return parsed schema objects.
"""
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Type, TypeVar

import pydantic

from .errors import ServerError
from .schemas import (
    AdminUser,
    Brand,
    Category,
    DashboardSummary,
    LoginResult,
    Order,
    Product,
    ProductPage,
    StoreSettings,
)

M = TypeVar("M", bound=pydantic.BaseModel)


@dataclass
class LocalFile:
    """A file picked on this machine, waiting to be uploaded."""
    filename: str
    content: bytes
    content_type: str = "application/octet-stream"

    @classmethod
    def from_path(cls, path) -> "LocalFile":
        path = Path(path)
        content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        return cls(filename=path.name, content=path.read_bytes(), content_type=content_type)

    def as_field(self, name: str):
        return (name, (self.filename, self.content, self.content_type))


def parse(model: Type[M], payload: Any) -> M:
    try:
        return model.model_validate(payload)
    except pydantic.ValidationError as e:
        raise ServerError(f"Unexpected {model.__name__} payload from server", payload=payload) from e


def parse_list(model: Type[M], payload: Any, key: Optional[str] = None) -> List[M]:
    # some list endpoints wrap their results, e.g. {"brands": [...]}
    if key and isinstance(payload, dict):
        payload = payload.get(key)
    if not isinstance(payload, list):
        raise ServerError(f"Invalid {model.__name__} list received", payload=payload)
    return [parse(model, item) for item in payload]


class _Resource:
    def __init__(self, client):
        self.client = client


class AuthAPI(_Resource):
    async def login(self, email: str, password: str) -> LoginResult:
        data = await self.client.post("/auth/login", json={"email": email, "password": password}, authenticated=False)
        result = parse(LoginResult, data)
        self.client.session.set_token(result.token)
        return result

    async def profile(self) -> AdminUser:
        return parse(AdminUser, await self.client.get("/auth/profile"))

    def logout(self) -> None:
        self.client.session.clear()


class DashboardAPI(_Resource):
    async def summary(self) -> DashboardSummary:
        return parse(DashboardSummary, await self.client.get("/admin/dashboard"))


class ProductsAPI(_Resource):
    async def list(
        self,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        search: Optional[str] = None,
        category: Optional[str] = None,
        brand: Optional[str] = None,
    ) -> ProductPage:
        params = {"page": page, "limit": limit, "search": search, "category": category, "brand": brand}
        return parse(ProductPage, await self.client.get("/admin/products", params=params))

    async def get(self, product_id: str) -> Product:
        return parse(Product, await self.client.get(f"/admin/products/{product_id}"))

    async def create(self, fields: Dict[str, str], images: Sequence[LocalFile] = ()) -> Product:
        files = [image.as_field("images") for image in images]
        return parse(Product, await self.client.post("/admin/products", data=fields, files=files))

    async def update(self, product_id: str, fields: Dict[str, str], images: Sequence[LocalFile] = ()) -> Product:
        files = [image.as_field("images") for image in images]
        return parse(Product, await self.client.put(f"/admin/products/{product_id}", data=fields, files=files))

    async def delete(self, product_id: str) -> None:
        await self.client.delete(f"/admin/products/{product_id}")

    async def update_inventory(self, product_id: str, size: int, stock: int) -> Product:
        data = await self.client.put(f"/admin/products/{product_id}/inventory", json={"size": size, "stock": stock})
        return parse(Product, data)

    async def set_featured(self, product_id: str, featured: bool) -> Product:
        data = await self.client.put(f"/admin/products/{product_id}/featured", json={"featured": featured})
        return parse(Product, data)


class FeaturedAPI(_Resource):
    async def list(self) -> List[Product]:
        return parse_list(Product, await self.client.get("/admin/featured-products"))

    async def candidates(self) -> List[Product]:
        return parse_list(Product, await self.client.get("/admin/products-for-featured"))

    async def replace(self, product_ids: Sequence[str]) -> List[Product]:
        data = await self.client.put("/admin/featured-products/bulk", json={"productIds": list(product_ids)})
        return parse_list(Product, data)


class BrandsAPI(_Resource):
    async def list(self) -> List[Brand]:
        data = await self.client.get("/admin/brands")
        return parse_list(Brand, data, key="brands")

    async def get_by_slug(self, slug: str) -> Brand:
        if not slug:
            raise ValueError("Brand slug is required")
        return parse(Brand, await self.client.get(f"/brands/slug/{slug}"))

    async def create(self, fields: Dict[str, str], logo: Optional[LocalFile] = None) -> Brand:
        files = [logo.as_field("logo")] if logo else None
        return parse(Brand, await self.client.post("/brands", data=fields, files=files))

    async def update(self, brand_id: str, fields: Dict[str, str], logo: Optional[LocalFile] = None) -> Brand:
        files = [logo.as_field("logo")] if logo else None
        return parse(Brand, await self.client.put(f"/brands/{brand_id}", data=fields, files=files))

    async def delete(self, brand_id: str) -> None:
        await self.client.delete(f"/brands/{brand_id}")


class CategoriesAPI(_Resource):
    async def list(self) -> List[Category]:
        return parse_list(Category, await self.client.get("/categories"), key="categories")

    async def create(self, body: Dict[str, Any]) -> Category:
        return parse(Category, await self.client.post("/categories", json=body))

    async def update(self, category_id: str, body: Dict[str, Any]) -> Category:
        return parse(Category, await self.client.put(f"/categories/{category_id}", json=body))

    async def delete(self, category_id: str) -> None:
        await self.client.delete(f"/categories/{category_id}")


class OrdersAPI(_Resource):
    async def list(self) -> List[Order]:
        return parse_list(Order, await self.client.get("/admin/orders"), key="orders")

    async def update_status(self, order_id: str, status: str) -> Order:
        data = await self.client.put(f"/admin/orders/{order_id}/status", json={"status": status})
        return parse(Order, data)


class SettingsAPI(_Resource):
    async def get(self) -> StoreSettings:
        return parse(StoreSettings, await self.client.get("/admin/store-settings"))

    async def update(self, changes: Dict[str, Any]) -> StoreSettings:
        return parse(StoreSettings, await self.client.put("/admin/store-settings", json=changes))
