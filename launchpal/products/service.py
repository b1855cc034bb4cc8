from sqlalchemy import select, desc, func
from sqlalchemy.orm import Session

from launchpal.auth.models import User
from launchpal.products.models import Product
from launchpal.products.schemas import ProductCreate, ProductUpdate
from launchpal.platforms.adapters.base import ProductDraft
from launchpal.platforms.service import adapter_for
from launchpal.shared.errors import NotFound, ProductHasLaunches
from launchpal.shared.logging import get_logger
from launchpal.usage.service import track_usage

logger = get_logger("products")

async def create_product(db: Session, user: User, payload: ProductCreate) -> Product:
    """
    Meter, check the platform connection, create on the platform, then
    persist the local mirror. A failed local write does not undo the
    platform-side post.
    """
    track_usage(db, user, "products.create")

    async with adapter_for(db, user.id, payload.platform) as adapter:
        result = await adapter.create_product(
            ProductDraft(
                name=payload.name,
                tagline=payload.tagline,
                description=payload.description,
                website=payload.website,
                media=payload.media,
                topics=payload.topics,
            )
        )

    product = Product(
        user_id=user.id,
        platform=payload.platform,
        platform_id=result["platform_id"],
        name=payload.name,
        tagline=payload.tagline,
        description=payload.description,
        website=payload.website,
        url=result.get("url"),
    )
    product.media = payload.media
    product.topics = payload.topics
    db.add(product)
    db.commit()
    db.refresh(product)
    logger.info(f"product {product.id} created on {product.platform}", extra={"user_id": user.id})
    return product

def get_product(db: Session, user_id: str, product_id: str) -> Product:
    product = db.get(Product, product_id)
    if not product or product.user_id != user_id:
        raise NotFound("Product not found")
    return product

def list_products(db: Session, user_id: str, platform: str | None = None) -> list[Product]:
    stmt = select(Product).where(Product.user_id == user_id)
    if platform:
        stmt = stmt.where(Product.platform == platform)
    return list(db.scalars(stmt.order_by(desc(Product.created_at))).all())

def update_product(db: Session, user_id: str, product_id: str, payload: ProductUpdate) -> Product:
    product = get_product(db, user_id, product_id)
    for field in ("name", "tagline", "description", "website"):
        val = getattr(payload, field)
        if val is not None:
            setattr(product, field, val.strip() or getattr(product, field))
    if payload.media is not None:
        product.media = payload.media
    if payload.topics is not None:
        product.topics = payload.topics
    db.commit()
    db.refresh(product)
    return product

def delete_product(db: Session, user_id: str, product_id: str) -> None:
    from launchpal.launches.models import Launch

    product = get_product(db, user_id, product_id)
    launches = db.scalar(select(func.count(Launch.id)).where(Launch.product_id == product.id))
    if launches:
        raise ProductHasLaunches("Cannot delete product with active launches")
    db.delete(product)
    db.commit()
