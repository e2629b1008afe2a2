import re
from decimal import Decimal
import time
from typing import Dict, Optional
from uuid import uuid4

from sqlalchemy import or_

from ..errors import NotFound, ValidationError
from ..models.product import Product
from ..utils.dto import to_product_dto
from ..utils.money import to_money
from ..utils.order_number import to_base36
from ..utils.pagination import normalize_paging, total_pages
from ..utils.validators import ensure_non_negative_int, ensure_text, optional_text
from .logging import log_event


SORT_ORDERS = {
    "newest": (Product.created_at.desc(), Product.id),
    "oldest": (Product.created_at.asc(), Product.id),
    "price_asc": (Product.price.asc(), Product.id),
    "price_desc": (Product.price.desc(), Product.id),
    "name_asc": (Product.name.asc(), Product.id),
    "name_desc": (Product.name.desc(), Product.id),
}


def slugify(name: str, suffix: Optional[str] = None) -> str:
    base = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-") or "product"
    if suffix is None:
        suffix = to_base36(int(time.time() * 1000)).lower()
    return f"{base}-{suffix}"


def _price(value) -> Decimal:
    try:
        price = to_money(value)
    except ValueError:
        raise ValidationError("price must be a number")
    if price < 0:
        raise ValidationError("price must be >= 0")
    return price


class CatalogService:
    """Catalog querying and admin maintenance of products.

    Responsibilities:
    - List/search active products with pagination, price range and sorting
    - Get single product detail by slug or id
    - Create, edit and delete products (admin)
    """

    def __init__(self, session_factory):
        self._session_factory = session_factory

    def list_products(
        self,
        *,
        search: Optional[str] = None,
        min_price=None,
        max_price=None,
        sort: str = "newest",
        page: int = 1,
        limit: int = 12,
    ) -> Dict:
        """Return dict: { items: [ProductDTO], total, page, limit, totalPages }"""
        p, lim = normalize_paging(page, limit, default_limit=12)
        with self._session_factory() as session:
            q = session.query(Product).filter(Product.active.is_(True))
            if search:
                like = f"%{search}%"
                q = q.filter(or_(Product.name.ilike(like), Product.description.ilike(like)))
            if min_price not in (None, ""):
                q = q.filter(Product.price >= _price(min_price))
            if max_price not in (None, ""):
                q = q.filter(Product.price <= _price(max_price))
            total = q.count()
            rows = (
                q.order_by(*SORT_ORDERS.get(sort, SORT_ORDERS["newest"]))
                .offset((p - 1) * lim)
                .limit(lim)
                .all()
            )
            return {
                "items": [to_product_dto(r) for r in rows],
                "total": total,
                "page": p,
                "limit": lim,
                "totalPages": total_pages(total, lim),
            }

    def get_product(self, slug_or_id: str) -> Dict:
        with self._session_factory() as session:
            r = (
                session.query(Product)
                .filter(or_(Product.slug == slug_or_id, Product.id == slug_or_id), Product.active.is_(True))
                .first()
            )
            if not r:
                raise NotFound("Product not found")
            return to_product_dto(r)

    def create_product(
        self,
        *,
        name,
        price,
        description: Optional[str] = None,
        thumbnail: Optional[str] = None,
        stock=0,
        slug: Optional[str] = None,
    ) -> Dict:
        clean_name = ensure_text(name, "name")
        if price is None or price == "":
            raise ValidationError("price is required")
        product = Product(
            id=str(uuid4()),
            name=clean_name,
            slug=slug or slugify(clean_name),
            description=optional_text(description, "description"),
            price=_price(price),
            thumbnail=optional_text(thumbnail, "thumbnail"),
            stock=ensure_non_negative_int(0 if stock is None else stock, "stock"),
            active=True,
        )
        with self._session_factory() as session:
            if session.query(Product.id).filter(Product.slug == product.slug).first():
                raise ValidationError(f"Slug already in use: {product.slug}")
            session.add(product)
            session.flush()
            result = to_product_dto(product)
        log_event("info", "product.created", product_id=product.id, slug=product.slug)
        return result

    def update_product(self, product_id: str, fields: Dict) -> Dict:
        with self._session_factory() as session:
            product = session.get(Product, product_id)
            if not product:
                raise NotFound("Product not found")
            if "name" in fields:
                product.name = ensure_text(fields["name"], "name")
            if "description" in fields:
                product.description = optional_text(fields["description"], "description")
            if "price" in fields:
                product.price = _price(fields["price"])
            if "thumbnail" in fields:
                product.thumbnail = optional_text(fields["thumbnail"], "thumbnail")
            if "stock" in fields:
                product.stock = ensure_non_negative_int(fields["stock"], "stock")
            if "active" in fields:
                if not isinstance(fields["active"], bool):
                    raise ValidationError("active must be a boolean")
                product.active = fields["active"]
            session.flush()
            return to_product_dto(product)

    def delete_product(self, product_id: str) -> None:
        """Delete a product; cart lines go with it, order items keep their snapshot."""
        with self._session_factory() as session:
            deleted = (
                session.query(Product)
                .filter(Product.id == product_id)
                .delete(synchronize_session=False)
            )
        if deleted:
            log_event("info", "product.deleted", product_id=product_id)
        return None
