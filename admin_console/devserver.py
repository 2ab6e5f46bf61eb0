"""
Development stand-in for the admin REST API.

Serves the endpoints the console consumes from MongoDB seeded with demo data,
so the console can be exercised without the real backend:

    python -m admin_console.devserver
"""
import json
import logging
import math
import os
import re
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from fastapi import Body, Depends, FastAPI, File, Form, Header, HTTPException, Query, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel, EmailStr, Field

from .config import LOW_STOCK_THRESHOLD, MAX_FEATURED_PRODUCTS
from .database import create_document, db
from .schemas import OrderStatus, StoreSettings

logger = logging.getLogger(__name__)

# App init
app = FastAPI(title="Admin Console Dev API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Security/JWT
JWT_SECRET = os.getenv("JWT_SECRET", "dev-secret-change-me")
JWT_ALG = "HS256"
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@example.com")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "admin123")


# Utils
def ensure_object_id(id_str: str) -> ObjectId:
    try:
        return ObjectId(id_str)
    except (InvalidId, TypeError):
        raise HTTPException(status_code=400, detail="Invalid ID format")


def serialize_doc(doc: Dict[str, Any]):
    if not doc:
        return doc
    doc["_id"] = str(doc["_id"])
    for k, v in list(doc.items()):
        if isinstance(v, datetime):
            doc[k] = v.isoformat()
        elif isinstance(v, ObjectId):
            doc[k] = str(v)
    return doc


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def slugify(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")


def exact_ci(value: str) -> dict:
    """Case-insensitive whole-value match."""
    return {"$regex": f"^{re.escape(value)}$", "$options": "i"}


def upload_url(upload: UploadFile) -> str:
    # files are not stored, only referenced
    return f"/uploads/{upload.filename}"


# Auth helpers
def create_token(user: dict):
    payload = {
        "sub": str(user["_id"]),
        "email": user.get("email"),
        "is_admin": user.get("is_admin", False),
        "exp": datetime.now(timezone.utc) + timedelta(days=7),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALG)


def get_current_user(authorization: Optional[str] = Header(None)):
    if not authorization:
        raise HTTPException(status_code=401, detail="Missing Authorization header")
    token = authorization.replace("Bearer ", "").strip()
    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALG])
        user = db["user"].find_one({"_id": ObjectId(payload.get("sub"))})
    except (JWTError, InvalidId, TypeError):
        raise HTTPException(status_code=401, detail="Invalid token")
    if not user:
        raise HTTPException(status_code=401, detail="Invalid token user")
    return user


def require_admin(user=Depends(get_current_user)):
    if not user.get("is_admin"):
        raise HTTPException(status_code=403, detail="Admin only")
    return user


def public_user(user: dict) -> dict:
    return {"_id": str(user["_id"]), "name": user["name"], "email": user["email"], "isAdmin": user.get("is_admin", False)}


def get_product_or_404(product_id: str) -> dict:
    product = db["product"].find_one({"_id": ensure_object_id(product_id)})
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


def parse_sizes(raw: Optional[str]) -> List[int]:
    if not raw:
        return []
    try:
        sizes = json.loads(raw)
        return [int(s) for s in sizes]
    except (ValueError, TypeError):
        raise HTTPException(status_code=400, detail="Sizes must be a JSON list of numbers")


def parse_price(raw: Optional[str], field: str) -> Optional[float]:
    if raw is None or raw == "":
        return None
    try:
        return float(raw)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"{field} must be a number")


# Request models
class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class InventoryUpdateRequest(BaseModel):
    size: int
    stock: int = Field(..., ge=0)


class FeaturedRequest(BaseModel):
    featured: bool


class BulkFeaturedRequest(BaseModel):
    productIds: List[str]


class CategoryRequest(BaseModel):
    name: str
    description: str = ""
    image: Optional[str] = None
    isActive: bool = True


class OrderStatusRequest(BaseModel):
    status: OrderStatus


# Routes
@app.get("/")
def root():
    return {"message": "Admin Console Dev API running"}


# Auth
@app.post("/api/auth/login")
def login(req: LoginRequest):
    user = db["user"].find_one({"email": req.email})
    if not user or not pwd_context.verify(req.password, user.get("password_hash", "")):
        raise HTTPException(status_code=401, detail="Invalid credentials")
    return {"token": create_token(user), "user": public_user(user)}


@app.get("/api/auth/profile")
def profile(user=Depends(get_current_user)):
    return public_user(user)


# Dashboard
@app.get("/api/admin/dashboard")
def dashboard(admin=Depends(require_admin)):
    orders = list(db["order"].find({}, {"totalPrice": 1, "status": 1}))
    stats = {
        "totalUsers": db["user"].count_documents({"is_admin": {"$ne": True}}),
        "totalProducts": db["product"].count_documents({}),
        "totalOrders": len(orders),
        "pendingOrders": sum(1 for o in orders if o["status"] == "pending"),
        "totalRevenue": sum(o["totalPrice"] for o in orders if o["status"] != "cancelled"),
    }
    recent = db["order"].find(
        {}, {"user": 1, "totalPrice": 1, "status": 1, "createdAt": 1}
    ).sort("createdAt", -1).limit(5)
    low_stock = db["product"].find(
        {"sizes": {"$elemMatch": {"stock": {"$lt": LOW_STOCK_THRESHOLD}}}},
        {"name": 1, "sizes": 1},
    ).sort("_id", 1)
    return {
        "stats": stats,
        "recentOrders": [serialize_doc(o) for o in recent],
        "lowStockProducts": [serialize_doc(p) for p in low_stock],
    }


# Products
@app.get("/api/admin/products")
def list_products(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=1000),
    search: Optional[str] = None,
    category: Optional[str] = None,
    brand: Optional[str] = None,
    admin=Depends(require_admin),
):
    query: Dict[str, Any] = {}
    if search:
        pattern = {"$regex": re.escape(search), "$options": "i"}
        query["$or"] = [{"name": pattern}, {"brand": pattern}]
    if category and category.lower() != "all":
        query["category"] = exact_ci(category)
    if brand:
        query["brand"] = exact_ci(brand)

    total = db["product"].count_documents(query)
    total_pages = max(1, math.ceil(total / limit))
    products = db["product"].find(query).sort("_id", 1).skip((page - 1) * limit).limit(limit)
    return {
        "products": [serialize_doc(p) for p in products],
        "pagination": {
            "currentPage": page,
            "totalPages": total_pages,
            "totalProducts": total,
            "hasNext": page < total_pages,
            "hasPrev": page > 1,
        },
    }


@app.get("/api/admin/products/{product_id}")
def get_product(product_id: str, admin=Depends(require_admin)):
    return serialize_doc(get_product_or_404(product_id))


@app.post("/api/admin/products")
def create_product(
    name: str = Form(...),
    brand: str = Form(...),
    price: str = Form(...),
    category: str = Form(...),
    description: str = Form(""),
    discounted_price: Optional[str] = Form(None, alias="discountedPrice"),
    sizes: Optional[str] = Form(None),
    images: Optional[List[UploadFile]] = File(None),
    admin=Depends(require_admin),
):
    amount = parse_price(price, "Price")
    if not amount or amount <= 0:
        raise HTTPException(status_code=400, detail="Valid price is required")
    doc = {
        "name": name.strip(),
        "brand": brand,
        "price": amount,
        "discountedPrice": parse_price(discounted_price, "Discounted price"),
        "category": category,
        "description": description,
        "images": [upload_url(f) for f in images or []],
        "sizes": [{"size": s, "stock": 0} for s in parse_sizes(sizes)],
        "featured": False,
    }
    product_id = create_document("product", doc)
    return serialize_doc(get_product_or_404(product_id))


@app.put("/api/admin/products/{product_id}")
def update_product(
    product_id: str,
    name: str = Form(...),
    brand: str = Form(...),
    price: str = Form(...),
    category: str = Form(...),
    description: str = Form(""),
    discounted_price: Optional[str] = Form(None, alias="discountedPrice"),
    sizes: Optional[str] = Form(None),
    images: Optional[List[UploadFile]] = File(None),
    admin=Depends(require_admin),
):
    product = get_product_or_404(product_id)
    amount = parse_price(price, "Price")
    if not amount or amount <= 0:
        raise HTTPException(status_code=400, detail="Valid price is required")
    # sizes that survive keep their stock
    stock = {s["size"]: s["stock"] for s in product["sizes"]}
    updates = {
        "name": name.strip(),
        "brand": brand,
        "price": amount,
        "discountedPrice": parse_price(discounted_price, "Discounted price"),
        "category": category,
        "description": description,
        "sizes": [{"size": s, "stock": stock.get(s, 0)} for s in parse_sizes(sizes)],
        "updatedAt": now_utc(),
    }
    if images:
        updates["images"] = [upload_url(f) for f in images]
    db["product"].update_one({"_id": product["_id"]}, {"$set": updates})
    return serialize_doc(get_product_or_404(product_id))


@app.delete("/api/admin/products/{product_id}")
def delete_product(product_id: str, admin=Depends(require_admin)):
    result = db["product"].delete_one({"_id": ensure_object_id(product_id)})
    if result.deleted_count == 0:
        raise HTTPException(status_code=404, detail="Product not found")
    return {"message": "Product deleted"}


@app.put("/api/admin/products/{product_id}/inventory")
def update_inventory(product_id: str, req: InventoryUpdateRequest, admin=Depends(require_admin)):
    product = get_product_or_404(product_id)
    sizes = product["sizes"]
    entry = next((s for s in sizes if s["size"] == req.size), None)
    if entry is None:
        raise HTTPException(status_code=404, detail=f"Size {req.size} not found")
    entry["stock"] = req.stock
    db["product"].update_one({"_id": product["_id"]}, {"$set": {"sizes": sizes, "updatedAt": now_utc()}})
    return serialize_doc(get_product_or_404(product_id))


@app.put("/api/admin/products/{product_id}/featured")
def set_featured(product_id: str, req: FeaturedRequest, admin=Depends(require_admin)):
    product = get_product_or_404(product_id)
    db["product"].update_one({"_id": product["_id"]}, {"$set": {"featured": req.featured}})
    return serialize_doc(get_product_or_404(product_id))


# Featured products
@app.get("/api/admin/featured-products")
def featured_products(admin=Depends(require_admin)):
    return [serialize_doc(p) for p in db["product"].find({"featured": True}).sort("_id", 1)]


@app.get("/api/admin/products-for-featured")
def products_for_featured(admin=Depends(require_admin)):
    return [serialize_doc(p) for p in db["product"].find().sort("_id", 1)]


@app.put("/api/admin/featured-products/bulk")
def bulk_featured(req: BulkFeaturedRequest, admin=Depends(require_admin)):
    if len(req.productIds) > MAX_FEATURED_PRODUCTS:
        raise HTTPException(status_code=400, detail=f"At most {MAX_FEATURED_PRODUCTS} products can be featured")
    wanted = [ensure_object_id(i) for i in req.productIds]
    db["product"].update_many({"featured": True}, {"$set": {"featured": False}})
    db["product"].update_many({"_id": {"$in": wanted}}, {"$set": {"featured": True}})
    featured = [db["product"].find_one({"_id": i}) for i in wanted]
    return [serialize_doc(p) for p in featured if p]


# Brands
@app.get("/api/admin/brands")
def list_brands(admin=Depends(require_admin)):
    return {"brands": [serialize_doc(b) for b in db["brand"].find().sort("name", 1)]}


@app.get("/api/brands/slug/{slug}")
def get_brand_by_slug(slug: str):
    brand = db["brand"].find_one({"slug": slug})
    if not brand:
        raise HTTPException(status_code=404, detail="Brand not found")
    return serialize_doc(brand)


@app.post("/api/brands")
def create_brand(
    name: str = Form(...),
    description: str = Form(""),
    is_active: bool = Form(True, alias="isActive"),
    logo: Optional[UploadFile] = File(None),
    admin=Depends(require_admin),
):
    name = name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="Brand name is required")
    if db["brand"].find_one({"name": exact_ci(name)}):
        raise HTTPException(status_code=400, detail="Brand already exists")
    doc = {
        "name": name,
        "slug": slugify(name),
        "description": description,
        "logo": upload_url(logo) if logo else "",
        "isActive": is_active,
    }
    brand_id = create_document("brand", doc)
    return serialize_doc(db["brand"].find_one({"_id": ObjectId(brand_id)}))


@app.put("/api/brands/{brand_id}")
def update_brand(
    brand_id: str,
    name: str = Form(...),
    description: str = Form(""),
    is_active: bool = Form(True, alias="isActive"),
    logo: Optional[UploadFile] = File(None),
    admin=Depends(require_admin),
):
    _id = ensure_object_id(brand_id)
    updates = {
        "name": name.strip(),
        "slug": slugify(name),
        "description": description,
        "isActive": is_active,
        "updatedAt": now_utc(),
    }
    if logo:
        updates["logo"] = upload_url(logo)
    result = db["brand"].update_one({"_id": _id}, {"$set": updates})
    if result.matched_count == 0:
        raise HTTPException(status_code=404, detail="Brand not found")
    return serialize_doc(db["brand"].find_one({"_id": _id}))


@app.delete("/api/brands/{brand_id}")
def delete_brand(brand_id: str, admin=Depends(require_admin)):
    result = db["brand"].delete_one({"_id": ensure_object_id(brand_id)})
    if result.deleted_count == 0:
        raise HTTPException(status_code=404, detail="Brand not found")
    return {"message": "Brand deleted"}


# Categories
@app.get("/api/categories")
def list_categories(admin=Depends(require_admin)):
    return [serialize_doc(c) for c in db["category"].find().sort("name", 1)]


@app.post("/api/categories")
def create_category(req: CategoryRequest, admin=Depends(require_admin)):
    if not req.name.strip():
        raise HTTPException(status_code=400, detail="Category name is required")
    category_id = create_document("category", req.model_dump(exclude_none=True))
    return serialize_doc(db["category"].find_one({"_id": ObjectId(category_id)}))


@app.put("/api/categories/{category_id}")
def update_category(category_id: str, req: CategoryRequest, admin=Depends(require_admin)):
    _id = ensure_object_id(category_id)
    updates = {**req.model_dump(exclude_none=True), "updatedAt": now_utc()}
    result = db["category"].update_one({"_id": _id}, {"$set": updates})
    if result.matched_count == 0:
        raise HTTPException(status_code=404, detail="Category not found")
    return serialize_doc(db["category"].find_one({"_id": _id}))


@app.delete("/api/categories/{category_id}")
def delete_category(category_id: str, admin=Depends(require_admin)):
    result = db["category"].delete_one({"_id": ensure_object_id(category_id)})
    if result.deleted_count == 0:
        raise HTTPException(status_code=404, detail="Category not found")
    return {"message": "Category deleted"}


# Orders
@app.get("/api/admin/orders")
def list_orders(admin=Depends(require_admin)):
    return [serialize_doc(o) for o in db["order"].find().sort("createdAt", -1)]


@app.put("/api/admin/orders/{order_id}/status")
def update_order_status(order_id: str, req: OrderStatusRequest, admin=Depends(require_admin)):
    _id = ensure_object_id(order_id)
    result = db["order"].update_one({"_id": _id}, {"$set": {"status": req.status, "updatedAt": now_utc()}})
    if result.matched_count == 0:
        raise HTTPException(status_code=404, detail="Order not found")
    return serialize_doc(db["order"].find_one({"_id": _id}))


# Store settings
@app.get("/api/admin/store-settings")
def get_store_settings(admin=Depends(require_admin)):
    settings = db["store_settings"].find_one()
    if not settings:
        raise HTTPException(status_code=404, detail="Store settings not found")
    return serialize_doc(settings)


@app.put("/api/admin/store-settings")
def update_store_settings(changes: Dict[str, Any] = Body(...), admin=Depends(require_admin)):
    current = db["store_settings"].find_one()
    if not current:
        raise HTTPException(status_code=404, detail="Store settings not found")
    merged = {**serialize_doc(dict(current)), **changes}
    try:
        validated = StoreSettings.model_validate(merged)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    updates = validated.to_wire(exclude={"id"})
    updates["updatedAt"] = now_utc()
    db["store_settings"].update_one({"_id": current["_id"]}, {"$set": updates})
    return serialize_doc(db["store_settings"].find_one({"_id": current["_id"]}))


# Demo data
DEMO_BRANDS = [
    ("Nike", "Just do it"),
    ("Adidas", "Impossible is nothing"),
    ("Puma", "Forever faster"),
    ("New Balance", "Fearlessly independent"),
    ("Asics", "Sound mind, sound body"),
    ("Reebok", "Be more human"),
    ("Skechers", "Comfort that performs"),
]

DEMO_CATEGORIES = [
    ("Running", "Shoes built for the road and the track"),
    ("Casual", "Everyday sneakers"),
]

# name, brand, category, price, discounted price, {size: stock}, featured
DEMO_PRODUCTS = [
    ("Air Max 90", "Nike", "Running", 8999, 7999, {7: 12, 8: 20, 9: 15}, True),
    ("Classic Runner", "Adidas", "Running", 5499, None, {7: 25, 8: 18, 9: 30}, False),
    ("Air Force 1", "Nike", "Casual", 7495, None, {8: 14, 9: 22, 10: 11}, False),
    ("Suede Classic", "Puma", "Casual", 4999, 3999, {7: 5, 8: 16, 9: 12}, False),
    ("Ultraboost 22", "Adidas", "Running", 14999, None, {8: 10, 9: 12, 10: 9}, True),
    ("RS-X", "Puma", "Casual", 8999, None, {8: 20, 9: 20}, False),
    ("Fresh Foam 1080", "New Balance", "Running", 12999, None, {8: 11, 9: 13}, False),
    ("Gel-Kayano 30", "Asics", "Running", 13999, 11999, {8: 15, 9: 18}, False),
    ("Club C 85", "Reebok", "Casual", 5999, None, {7: 30, 8: 25}, False),
    ("Go Walk 6", "Skechers", "Casual", 4499, None, {7: 17, 8: 19}, False),
    ("Pegasus 40", "Nike", "Running", 10795, None, {8: 12, 9: 14}, False),
    ("Forum Low", "Adidas", "Casual", 8999, None, {8: 19, 9: 21}, False),
]

DEMO_CUSTOMERS = [
    ("Asha Rao", "asha@example.com"),
    ("Vikram Shah", "vikram@example.com"),
]


def seed_demo_data():
    """Fill the store with demo data; existing collections are dropped."""
    for name in db.list_collection_names():
        db.drop_collection(name)
    created = now_utc()

    db["user"].insert_one({
        "name": "Store Admin",
        "email": ADMIN_EMAIL,
        "password_hash": pwd_context.hash(ADMIN_PASSWORD),
        "is_admin": True,
    })
    for name, email in DEMO_CUSTOMERS:
        db["user"].insert_one({"name": name, "email": email, "password_hash": "", "is_admin": False})

    for name, description in DEMO_BRANDS:
        create_document("brand", {
            "name": name,
            "slug": slugify(name),
            "description": description,
            "logo": f"/uploads/{slugify(name)}.png",
            "isActive": True,
        })
    for name, description in DEMO_CATEGORIES:
        create_document("category", {"name": name, "description": description, "isActive": True})

    products = {}
    for name, brand, category, price, discounted, sizes, featured in DEMO_PRODUCTS:
        products[name] = create_document("product", {
            "name": name,
            "brand": brand,
            "category": category,
            "price": price,
            "discountedPrice": discounted,
            "description": f"{brand} {name}",
            "images": [f"/uploads/{slugify(name)}.jpg"],
            "sizes": [{"size": size, "stock": stock} for size, stock in sizes.items()],
            "featured": featured,
        })

    orders = [
        (DEMO_CUSTOMERS[0], "Air Max 90", 8, 1, 7999, 99, "pending", 1),
        (DEMO_CUSTOMERS[1], "Classic Runner", 9, 2, 5499, 0, "processing", 2),
        (DEMO_CUSTOMERS[0], "Club C 85", 7, 1, 5999, 99, "delivered", 3),
    ]
    for (customer, email), product, size, quantity, price, shipping, status, days_ago in orders:
        create_document("order", {
            "user": {"name": customer, "email": email},
            "items": [{"product": products[product], "name": product, "size": size, "quantity": quantity, "price": price}],
            "totalPrice": price * quantity + shipping,
            "shippingPrice": shipping,
            "shippingAddress": {
                "street": "12 MG Road",
                "city": "Bengaluru",
                "state": "Karnataka",
                "zipCode": "560001",
                "country": "India",
            },
            "paymentMethod": "cod",
            "status": status,
            "createdAt": created - timedelta(days=days_ago),
        })

    settings = StoreSettings(
        store_name="Joota Junction",
        about_store="Sneakers for every stride.",
        contact_emails=[{"email": "support@example.com", "label": "Support"}],
        phone_numbers=[{"number": "+91 80 4000 0000"}],
        addresses=[{"street": "12 MG Road", "city": "Bengaluru", "state": "Karnataka", "zip_code": "560001"}],
        shipping_settings={"free_shipping_threshold": 2999, "default_shipping_cost": 99},
        tax_settings={"gst_percentage": 18, "is_tax_inclusive": True},
    )
    create_document("store_settings", settings.to_wire(exclude={"id"}))
    logger.info("Seeded demo data: %d products", len(DEMO_PRODUCTS))


@app.on_event("startup")
def seed_on_startup():
    seed_demo_data()


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=logging.INFO)
    port = int(os.getenv("PORT", 5001))
    uvicorn.run(app, host="0.0.0.0", port=port)
