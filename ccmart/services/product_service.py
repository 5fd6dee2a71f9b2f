# ccmart/services/product_service.py
from typing import List, Optional, Tuple
from decimal import Decimal
import logging
import pydantic
from ..exceptions import ApiError, ShopError
from ..models.notice import Notice
from ..models.product import Product
from .api_client import ApiClient

logger = logging.getLogger(__name__)

# Shown when the backend cannot be reached
OFFLINE_PRODUCTS = [
    Product(
        id=1,
        name="Fresh Red Apples",
        description="Crisp and juicy red apples, freshly picked from our orchard.",
        price=Decimal("4.99"),
        quantity=25,
        category="Fruits",
        image="/uploads/images/apple.jpg"
    ),
    Product(
        id=2,
        name="Whole Chicken",
        description="Farm-fresh whole chicken, free-range and organic.",
        price=Decimal("12.99"),
        quantity=0,
        category="Meat",
        image="/uploads/images/chicken.jpg"
    ),
    Product(
        id=3,
        name="Fresh Milk Bread",
        description="Soft and fluffy bread made with fresh farm milk.",
        price=Decimal("3.49"),
        quantity=15,
        category="Bakery",
        image="/uploads/images/bread.jpg"
    ),
]

class ProductService:
    def __init__(self, api: ApiClient):
        self.api = api

    async def get_all_products(self) -> List[Product]:
        """Fetch the full catalogue"""
        data = await self.api.get("/products")
        try:
            return [Product.model_validate(item) for item in data or []]
        except pydantic.ValidationError as e:
            raise ApiError(f"Malformed product payload: {e}")

    async def get_product(self, product_id: int) -> Product:
        """Fetch one product"""
        data = await self.api.get(f"/products/{product_id}")
        try:
            return Product.model_validate(data)
        except pydantic.ValidationError as e:
            raise ApiError(f"Malformed product payload: {e}")

    async def load_catalogue(self) -> Tuple[List[Product], Optional[Notice]]:
        """Catalogue for browsing, falling back to offline data"""
        try:
            return await self.get_all_products(), None
        except ShopError as e:
            logger.error(f"Failed to load products: {e}")
            return list(OFFLINE_PRODUCTS), Notice.error("Failed to load products. Using offline data.")

    async def find_product(self, product_id: int) -> Optional[Product]:
        """One product, from the backend or else the offline data"""
        try:
            return await self.get_product(product_id)
        except ShopError as e:
            logger.error(f"Failed to load product {product_id}: {e}")
            for product in OFFLINE_PRODUCTS:
                if product.id == product_id:
                    return product
            return None

def filter_products(products: List[Product], search: Optional[str] = None,
                    category: Optional[str] = None) -> List[Product]:
    """Filter by search term (name or description) and then by category"""
    filtered = products
    if search:
        term = search.lower()
        filtered = [
            p for p in filtered
            if term in p.name.lower() or term in p.description.lower()
        ]
    if category:
        filtered = [p for p in filtered if p.category == category]
    return filtered

def get_categories(products: List[Product]) -> List[str]:
    """Unique categories in the order they first appear"""
    categories = []
    for product in products:
        if product.category and product.category not in categories:
            categories.append(product.category)
    return categories
