"""
Drafts for the add/edit dialogs.

A draft is held apart from the confirmed entity lists. Submitting validates
locally first; a draft that fails validation never reaches the backend. After
a successful create or update the draft is reset and the owning list is
refetched wholesale.
"""
import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from .api_client import ApiClient
from .config import MAX_FEATURED_PRODUCTS
from .errors import ApiError, ValidationError
from .fetchers import fetch_featured_products
from .resources import LocalFile
from .schemas import Address, Brand, Category, ContactEmail, PhoneNumber, Product, StoreSettings, WEEKDAYS
from .state import AdminState

logger = logging.getLogger(__name__)


def _parse_amount(text: str) -> Optional[float]:
    try:
        return float(str(text).strip())
    except ValueError:
        return None


def _format_amount(value: Optional[float]) -> str:
    if value is None:
        return ""
    return str(int(value)) if float(value).is_integer() else str(value)


def _parse_sizes(text: str) -> Optional[List[int]]:
    parts = [part.strip() for part in text.split(",") if part.strip()]
    try:
        return [int(part) for part in parts]
    except ValueError:
        return None


@dataclass
class ProductDraft:
    name: str = ""
    brand: str = ""
    price: str = ""
    discounted_price: str = ""
    category: str = ""
    sizes: str = ""
    description: str = ""
    # new uploads only; stored images are kept by the backend
    images: List[LocalFile] = field(default_factory=list)

    @classmethod
    def from_product(cls, product: Product) -> "ProductDraft":
        return cls(
            name=product.name,
            brand=product.brand,
            price=_format_amount(product.price),
            discounted_price=_format_amount(product.discounted_price),
            category=product.category,
            sizes=", ".join(str(s.size) for s in product.sizes),
            description=product.description,
        )

    def validate(self) -> Dict[str, str]:
        errors = {}
        if not self.name.strip():
            errors["name"] = "Product name is required"
        if not self.brand:
            errors["brand"] = "Please select a brand"
        if not self.category:
            errors["category"] = "Please select a category"
        price = _parse_amount(self.price)
        if price is None or price <= 0:
            errors["price"] = "Valid price is required"
        if self.discounted_price.strip():
            discounted = _parse_amount(self.discounted_price)
            if discounted is None or discounted < 0:
                errors["discounted_price"] = "Discounted price must be a positive number"
            elif price is not None and discounted > price:
                logger.warning("Discounted price %s is above price %s for %r", discounted, price, self.name)
        if _parse_sizes(self.sizes) is None:
            errors["sizes"] = "Sizes must be whole numbers separated by commas"
        if not self.description.strip():
            errors["description"] = "Product description is required"
        return errors

    def to_fields(self) -> Dict[str, str]:
        return {
            "name": self.name.strip(),
            "brand": self.brand,
            "price": self.price.strip(),
            "discountedPrice": self.discounted_price.strip(),
            "category": self.category,
            "description": self.description.strip(),
            "sizes": json.dumps(_parse_sizes(self.sizes) or []),
        }


@dataclass
class BrandDraft:
    name: str = ""
    description: str = ""
    # stored URL, or a LocalFile waiting to be uploaded
    logo: Union[str, LocalFile, None] = ""
    is_active: bool = True

    @classmethod
    def from_brand(cls, brand: Brand) -> "BrandDraft":
        return cls(name=brand.name, description=brand.description, logo=brand.logo or "", is_active=brand.is_active)

    def validate(self) -> Dict[str, str]:
        if not self.name.strip():
            return {"name": "Brand name is required"}
        return {}

    def to_fields(self) -> Dict[str, str]:
        return {
            "name": self.name.strip(),
            "description": self.description.strip(),
            "isActive": "true" if self.is_active else "false",
        }

    @property
    def pending_logo(self) -> Optional[LocalFile]:
        return self.logo if isinstance(self.logo, LocalFile) else None


@dataclass
class CategoryDraft:
    name: str = ""
    description: str = ""
    image: str = ""

    @classmethod
    def from_category(cls, category: Category) -> "CategoryDraft":
        return cls(name=category.name, description=category.description or "", image=category.image or "")

    def validate(self) -> Dict[str, str]:
        errors = {}
        if not self.name.strip():
            errors["name"] = "Category name is required"
        if not self.description.strip():
            errors["description"] = "Category description is required"
        return errors

    def to_body(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"name": self.name.strip(), "description": self.description.strip(), "isActive": True}
        if self.image:
            body["image"] = self.image
        return body


class EntityForm(ABC):
    label = "Item"

    def __init__(self, client: ApiClient, state: AdminState, on_saved: Optional[Callable[[], Awaitable[Any]]] = None):
        self.client = client
        self.state = state
        self.on_saved = on_saved
        self.editing = None
        self.draft = self.blank()

    @abstractmethod
    def blank(self):
        ...

    @abstractmethod
    def draft_from(self, entity):
        ...

    @abstractmethod
    async def create(self):
        ...

    @abstractmethod
    async def update(self, entity_id: str):
        ...

    @property
    def is_editing(self) -> bool:
        return self.editing is not None

    def start_create(self) -> None:
        self.editing = None
        self.draft = self.blank()

    def edit(self, entity) -> None:
        self.editing = entity
        self.draft = self.draft_from(entity)

    def cancel(self) -> None:
        self.start_create()

    async def submit(self):
        errors = self.draft.validate()
        if errors:
            error = ValidationError(errors=errors)
            self.state.notify(error.message)
            raise error

        action = "update" if self.is_editing else "add"
        done = "updated" if self.is_editing else "added"
        try:
            if self.is_editing:
                result = await self.update(self.editing.id)
            else:
                result = await self.create()
        except ApiError as e:
            logger.error("Error trying to %s %s: %s", action, self.label.lower(), e.message)
            self.state.notify(e.message or f"Failed to {action} {self.label.lower()}")
            raise

        self.state.notify(f"{self.label} {done} successfully", level="success")
        self.start_create()
        if self.on_saved is not None:
            await self.on_saved()
        return result


class ProductForm(EntityForm):
    label = "Product"

    def blank(self) -> ProductDraft:
        return ProductDraft()

    def draft_from(self, product: Product) -> ProductDraft:
        return ProductDraft.from_product(product)

    async def create(self) -> Product:
        return await self.client.products.create(self.draft.to_fields(), self.draft.images)

    async def update(self, entity_id: str) -> Product:
        return await self.client.products.update(entity_id, self.draft.to_fields(), self.draft.images)


class BrandForm(EntityForm):
    label = "Brand"

    def blank(self) -> BrandDraft:
        return BrandDraft()

    def draft_from(self, brand: Brand) -> BrandDraft:
        return BrandDraft.from_brand(brand)

    async def create(self) -> Brand:
        return await self.client.brands.create(self.draft.to_fields(), self.draft.pending_logo)

    async def update(self, entity_id: str) -> Brand:
        return await self.client.brands.update(entity_id, self.draft.to_fields(), self.draft.pending_logo)


class CategoryForm(EntityForm):
    label = "Category"

    def blank(self) -> CategoryDraft:
        return CategoryDraft()

    def draft_from(self, category: Category) -> CategoryDraft:
        return CategoryDraft.from_category(category)

    async def create(self) -> Category:
        return await self.client.categories.create(self.draft.to_body())

    async def update(self, entity_id: str) -> Category:
        return await self.client.categories.update(entity_id, self.draft.to_body())


def _replace(entry, fields: Dict[str, Any]):
    unknown = set(fields) - set(type(entry).model_fields)
    if unknown:
        raise AttributeError(f"{type(entry).__name__} has no field(s) {', '.join(sorted(unknown))}")
    return entry.model_copy(update=fields)


class StoreSettingsForm:
    """Edits a copy of the store settings; save sends only what changed."""

    def __init__(self, client: ApiClient, state: AdminState):
        self.client = client
        self.state = state
        self.draft: Optional[StoreSettings] = None
        self.message = ""
        self.saving = False

    def load(self) -> Optional[StoreSettings]:
        confirmed = self.state.settings.value
        self.draft = confirmed.model_copy(deep=True) if confirmed else None
        self.message = ""
        return self.draft

    def _require(self) -> StoreSettings:
        if self.draft is None and self.load() is None:
            raise RuntimeError("Store settings have not been fetched yet")
        return self.draft

    # contact emails
    def add_contact_email(self) -> int:
        draft = self._require()
        draft.contact_emails = [*draft.contact_emails, ContactEmail()]
        return len(draft.contact_emails) - 1

    def remove_contact_email(self, index: int) -> None:
        draft = self._require()
        draft.contact_emails = [e for i, e in enumerate(draft.contact_emails) if i != index]

    def update_contact_email(self, index: int, **fields) -> None:
        draft = self._require()
        emails = list(draft.contact_emails)
        emails[index] = _replace(emails[index], fields)
        draft.contact_emails = emails

    # phone numbers
    def add_phone_number(self) -> int:
        draft = self._require()
        draft.phone_numbers = [*draft.phone_numbers, PhoneNumber()]
        return len(draft.phone_numbers) - 1

    def remove_phone_number(self, index: int) -> None:
        draft = self._require()
        draft.phone_numbers = [p for i, p in enumerate(draft.phone_numbers) if i != index]

    def update_phone_number(self, index: int, **fields) -> None:
        draft = self._require()
        phones = list(draft.phone_numbers)
        phones[index] = _replace(phones[index], fields)
        draft.phone_numbers = phones

    # addresses
    def add_address(self) -> int:
        draft = self._require()
        draft.addresses = [*draft.addresses, Address()]
        return len(draft.addresses) - 1

    def remove_address(self, index: int) -> None:
        draft = self._require()
        draft.addresses = [a for i, a in enumerate(draft.addresses) if i != index]

    def update_address(self, index: int, **fields) -> None:
        draft = self._require()
        addresses = list(draft.addresses)
        addresses[index] = _replace(addresses[index], fields)
        draft.addresses = addresses

    def set_social_media(self, **links) -> None:
        draft = self._require()
        draft.social_media = _replace(draft.social_media, links)

    def set_business_hours(self, day: str, **fields) -> None:
        if day not in WEEKDAYS:
            raise ValueError(f"Unknown weekday: {day}")
        draft = self._require()
        hours = _replace(getattr(draft.business_hours, day), fields)
        draft.business_hours = draft.business_hours.model_copy(update={day: hours})

    def set_shipping(self, **fields) -> None:
        draft = self._require()
        draft.shipping_settings = _replace(draft.shipping_settings, fields)

    def set_tax(self, **fields) -> None:
        draft = self._require()
        draft.tax_settings = _replace(draft.tax_settings, fields)

    def update(self, **fields) -> None:
        """Top-level fields: store_name, about_store, currency."""
        self.draft = _replace(self._require(), fields)

    def validate(self) -> Dict[str, str]:
        draft = self._require()
        errors = {}
        if not draft.store_name.strip():
            errors["storeName"] = "Store name is required"
        for i, entry in enumerate(draft.contact_emails):
            if "@" not in entry.email:
                errors[f"contactEmails[{i}]"] = "Enter a valid email address"
        for i, entry in enumerate(draft.phone_numbers):
            if not entry.number.strip():
                errors[f"phoneNumbers[{i}]"] = "Phone number is required"
        for i, entry in enumerate(draft.addresses):
            if not entry.street.strip() or not entry.city.strip():
                errors[f"addresses[{i}]"] = "Street and city are required"
        return errors

    def changes(self) -> Dict[str, Any]:
        draft = self._require().to_wire(exclude={"id"})
        confirmed = self.state.settings.value
        if confirmed is None:
            return draft
        current = confirmed.to_wire(exclude={"id"})
        return {key: value for key, value in draft.items() if current.get(key) != value}

    async def save(self) -> StoreSettings:
        errors = self.validate()
        if errors:
            error = ValidationError(errors=errors)
            self.message = error.message
            raise error

        changes = self.changes()
        if not changes:
            self.message = "No changes to save"
            return self.state.settings.value

        self.saving = True
        self.message = ""
        try:
            settings = await self.client.settings.update(changes)
        except ApiError as e:
            logger.error("Error updating store settings: %s", e.message)
            self.message = e.message or "Error updating settings"
            self.state.notify(self.message)
            raise
        finally:
            self.saving = False

        self.state.settings.set(settings)
        self.draft = settings.model_copy(deep=True)
        self.message = "Settings updated successfully!"
        return settings


class FeaturedSelection:
    """The "manage featured products" dialog."""

    def __init__(self, client: ApiClient, state: AdminState, limit: int = MAX_FEATURED_PRODUCTS):
        self.client = client
        self.state = state
        self.limit = limit
        self.selected: List[str] = []
        self.is_open = False
        self.saving = False

    def current_ids(self) -> List[str]:
        return [p.id for p in self.state.featured.value]

    def open(self) -> None:
        self.selected = self.current_ids()
        self.is_open = True

    def close(self) -> None:
        self.is_open = False
        self.selected = []

    def is_selected(self, product_id: str) -> bool:
        return product_id in self.selected

    def toggle(self, product_id: str) -> bool:
        if product_id in self.selected:
            self.selected = [i for i in self.selected if i != product_id]
            return False
        if len(self.selected) >= self.limit:
            raise ValidationError(errors={"featured": f"At most {self.limit} products can be featured"})
        self.selected = [*self.selected, product_id]
        return True

    def clear(self) -> None:
        self.selected = []

    def select_current(self) -> None:
        self.selected = self.current_ids()

    async def save(self) -> List[Product]:
        self.saving = True
        try:
            featured = await self.client.featured.replace(self.selected)
        except ApiError as e:
            logger.error("Error updating featured products: %s", e.message)
            self.state.notify(e.message or "Failed to update featured products")
            raise
        finally:
            self.saving = False
        self.state.featured.set(featured)
        self.state.touch()
        self.close()
        return featured

    async def remove(self, product_id: str) -> bool:
        try:
            await self.client.products.set_featured(product_id, False)
        except ApiError as e:
            logger.error("Error removing %s from featured: %s", product_id, e.message)
            self.state.notify(e.message or "Failed to remove product from featured")
            raise
        updated = await fetch_featured_products(self.client, self.state)
        self.state.touch()
        return updated
