"""FastAPI routes for the Catalogue context: products and vendor shops."""

from decimal import Decimal

from fastapi import APIRouter, Depends, Query, Request

from catalogue.api.schemas import (
    CreateProductRequest,
    OpenShopRequest,
    ProductSchema,
    ShopSchema,
    UpdateProductRequest,
)
from catalogue.product.creation import CreateProduct, CreateProductHandler
from catalogue.product.management import DeactivateProduct, ProductManagementHandler, UpdateProduct
from catalogue.product.product import ProductRepository
from catalogue.product.search import ProductQuery, ProductSort, search_products
from catalogue.shop.management import OpenShop, ShopHandler
from identity.api.dependencies import require_role
from identity.user.user import User, UserRole
from shared.api import ApiResponse, get_database

# ---------------------------------------------------------------------------
# Product Router (public)
# ---------------------------------------------------------------------------
product_router = APIRouter(prefix="/products", tags=["products"])


@product_router.get("", response_model=ApiResponse[list[ProductSchema]])
def list_products(
    request: Request,
    search: str | None = Query(None, max_length=100),
    min_price: Decimal | None = Query(None, ge=0),
    max_price: Decimal | None = Query(None, ge=0),
    shop_id: str | None = None,
    sort: ProductSort = ProductSort.NEWEST,
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
) -> ApiResponse:
    query = ProductQuery(
        search=search,
        min_price=min_price,
        max_price=max_price,
        shop_id=shop_id,
        sort=sort,
        limit=limit,
        offset=offset,
    )
    with get_database(request).transaction() as session:
        products = [ProductSchema.model_validate(p) for p in search_products(session, query)]
    return ApiResponse(message="products retrieved successfully", data=products)


@product_router.get("/{product_id}", response_model=ApiResponse[ProductSchema])
def get_product(request: Request, product_id: str) -> ApiResponse:
    with get_database(request).transaction() as session:
        product = ProductSchema.model_validate(ProductRepository(session).get_active(product_id))
    return ApiResponse(message="product retrieved successfully", data=product)


# ---------------------------------------------------------------------------
# Vendor Router
# ---------------------------------------------------------------------------
vendor_catalogue_router = APIRouter(prefix="/vendor", tags=["vendor"])

_require_vendor = require_role(UserRole.VENDOR)


@vendor_catalogue_router.post("/shop", status_code=201, response_model=ApiResponse[ShopSchema])
def open_shop(request: Request, body: OpenShopRequest, vendor: User = Depends(_require_vendor)) -> ApiResponse:
    command = OpenShop(owner_id=vendor.id, name=body.name, description=body.description)
    shop = ShopHandler(get_database(request)).open_shop(command)
    return ApiResponse(message="shop created successfully", data=ShopSchema.model_validate(shop))


@vendor_catalogue_router.get("/shop", response_model=ApiResponse[ShopSchema])
def get_my_shop(request: Request, vendor: User = Depends(_require_vendor)) -> ApiResponse:
    shop = ShopHandler(get_database(request)).get_shop_for_owner(vendor.id)
    return ApiResponse(message="shop retrieved successfully", data=ShopSchema.model_validate(shop))


@vendor_catalogue_router.post("/products", status_code=201, response_model=ApiResponse[ProductSchema])
def create_product(
    request: Request,
    body: CreateProductRequest,
    vendor: User = Depends(_require_vendor),
) -> ApiResponse:
    command = CreateProduct(
        owner_id=vendor.id,
        name=body.name,
        description=body.description,
        price=body.price,
        stock_quantity=body.stock_quantity,
        image_url=body.image_url,
    )
    product = CreateProductHandler(get_database(request)).create_product(command)
    return ApiResponse(message="product created successfully", data=ProductSchema.model_validate(product))


@vendor_catalogue_router.get("/products", response_model=ApiResponse[list[ProductSchema]])
def list_my_products(request: Request, vendor: User = Depends(_require_vendor)) -> ApiResponse:
    products = ProductManagementHandler(get_database(request)).list_shop_products(vendor.id)
    return ApiResponse(
        message="products retrieved successfully",
        data=[ProductSchema.model_validate(p) for p in products],
    )


@vendor_catalogue_router.put("/products/{product_id}", response_model=ApiResponse[ProductSchema])
def update_product(
    request: Request,
    product_id: str,
    body: UpdateProductRequest,
    vendor: User = Depends(_require_vendor),
) -> ApiResponse:
    command = UpdateProduct(owner_id=vendor.id, product_id=product_id, **body.model_dump())
    product = ProductManagementHandler(get_database(request)).update_product(command)
    return ApiResponse(message="product updated successfully", data=ProductSchema.model_validate(product))


@vendor_catalogue_router.delete("/products/{product_id}", response_model=ApiResponse[ProductSchema])
def deactivate_product(request: Request, product_id: str, vendor: User = Depends(_require_vendor)) -> ApiResponse:
    command = DeactivateProduct(owner_id=vendor.id, product_id=product_id)
    product = ProductManagementHandler(get_database(request)).deactivate_product(command)
    return ApiResponse(message="product deactivated successfully", data=ProductSchema.model_validate(product))
