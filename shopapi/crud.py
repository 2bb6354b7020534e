from decimal import Decimal, ROUND_HALF_UP
from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session, aliased
from sqlalchemy.exc import IntegrityError
from typing import List, Optional

from . import models, schemas


class NotFound(LookupError):
    pass


class Conflict(ValueError):
    pass


# Business rule: amounts stored rounded to 2 decimals, non-negative

def round_amount(value: Decimal) -> Decimal:
    return Decimal(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def normalise_email(email: str) -> str:
    # Emails are matched case-insensitively by storing them lower-cased
    return email.strip().lower()


# -------------------- Users --------------------

def get_user(db: Session, user_id: int) -> Optional[models.User]:
    return db.get(models.User, user_id)


def get_user_by_email(db: Session, email: str) -> Optional[models.User]:
    return db.query(models.User).filter(models.User.email == normalise_email(email)).first()


def create_user_with_auth(
    db: Session,
    *,
    email: str,
    first_name: str,
    last_name: str,
    provider: str,
    provider_id: str,
    avatar: Optional[str] = None,
    password_hash: Optional[str] = None,
) -> models.User:
    """Insert a user and its first login method in one transaction.

    Billing and shipping names default to the user's names; the rest of both
    addresses stays empty until the user fills it in.
    """
    db_user = models.User(
        first_name=first_name,
        last_name=last_name,
        email=normalise_email(email),
        password_hash=password_hash,
        billing_first_name=first_name,
        billing_last_name=last_name,
        shipping_first_name=first_name,
        shipping_last_name=last_name,
    )
    db_user.auths.append(models.Auth(provider=provider, provider_id=provider_id, avatar=avatar))
    db.add(db_user)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise Conflict("user or login already exists") from e
    db.refresh(db_user)
    return db_user


def update_address(db: Session, user: models.User, prefix: str, address: schemas.AddressIn) -> models.User:
    for column, value in address.as_columns(prefix).items():
        setattr(user, column, value)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


# -------------------- Auth rows --------------------

def get_auth_by_provider(db: Session, provider: str, provider_id: str) -> Optional[models.Auth]:
    return (
        db.query(models.Auth)
        .filter(models.Auth.provider == provider, models.Auth.provider_id == provider_id)
        .first()
    )


def get_auth_for_user(db: Session, auth_id: int, user_id: int) -> Optional[models.Auth]:
    return db.query(models.Auth).filter(models.Auth.id == auth_id, models.Auth.user_id == user_id).first()


def list_auths(db: Session, user_id: int) -> List[models.Auth]:
    """Login methods of a user, most recently used first."""
    return (
        db.query(models.Auth)
        .filter(models.Auth.user_id == user_id)
        .order_by(models.Auth.last_used_at.desc(), models.Auth.id.desc())
        .all()
    )


def count_auths(db: Session, user_id: int) -> int:
    return db.scalar(select(func.count(models.Auth.id)).where(models.Auth.user_id == user_id))


def create_auth(
    db: Session, user: models.User, provider: str, provider_id: str, avatar: Optional[str] = None
) -> models.Auth:
    db_auth = models.Auth(user_id=user.id, provider=provider, provider_id=provider_id, avatar=avatar)
    db.add(db_auth)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise Conflict("login already linked") from e
    db.refresh(db_auth)
    return db_auth


def touch_auth(db: Session, auth: models.Auth, avatar: Optional[str] = None) -> models.Auth:
    """Mark a login method as just used; fill in the avatar only if none is stored yet."""
    values = {"last_used_at": models.utcnow()}
    if avatar:
        values["avatar"] = func.coalesce(models.Auth.avatar, avatar)
    db.execute(
        update(models.Auth)
        .where(models.Auth.id == auth.id)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    db.commit()
    db.refresh(auth)
    return auth


def delete_auth_unless_last(db: Session, auth_id: int, user_id: int) -> bool:
    """Delete the row only while the user still has another one.

    The count and the delete run as a single statement. Returns False when
    nothing was deleted.
    """
    others = aliased(models.Auth)
    remaining = select(func.count(others.id)).where(others.user_id == user_id).scalar_subquery()
    result = db.execute(
        delete(models.Auth)
        .where(models.Auth.id == auth_id, models.Auth.user_id == user_id, remaining > 1)
        .execution_options(synchronize_session=False)
    )
    db.commit()
    return result.rowcount == 1


# -------------------- Catalogue --------------------

def list_products(db: Session, offset: int = 0, limit: Optional[int] = None) -> List[models.Product]:
    query = db.query(models.Product).order_by(models.Product.id)
    if offset:
        query = query.offset(offset)
    if limit is not None:
        query = query.limit(limit)
    return query.all()


def count_products(db: Session) -> int:
    return db.scalar(select(func.count(models.Product.id)))


def list_products_by_category(db: Session, category: str) -> List[models.Product]:
    return db.query(models.Product).filter(models.Product.category == category).order_by(models.Product.id).all()


def get_product(db: Session, product_id: int) -> Optional[models.Product]:
    return db.get(models.Product, product_id)


def list_categories(db: Session) -> List[str]:
    rows = db.execute(select(models.Product.category).order_by(models.Product.id)).scalars()
    # unique, in order of first appearance
    return list(dict.fromkeys(rows))


def list_home_categories(db: Session) -> List[dict]:
    categories: dict[str, dict] = {}
    for product in list_products(db):
        entry = categories.get(product.category)
        if entry is None:
            # first product of the category provides the image
            categories[product.category] = {"name": product.category, "img_url": product.img_url, "product_count": 1}
        else:
            entry["product_count"] += 1
    return sorted(categories.values(), key=lambda c: c["name"])


def list_states(db: Session) -> List[models.State]:
    return db.query(models.State).order_by(models.State.id).all()


def list_shipping_types(db: Session) -> List[models.ShippingType]:
    return db.query(models.ShippingType).order_by(models.ShippingType.id).all()


# -------------------- Orders --------------------

def create_order(db: Session, user_id: int, order: schemas.OrderIn) -> models.Order:
    """Create an order and its line items in one transaction.

    Unit prices are copied from the product table and the shipping cost from
    the shipping type, so the stored order does not depend on later price
    changes.
    """
    shipping_type = db.get(models.ShippingType, order.shipping_type_id)
    if not shipping_type:
        raise ValueError("unknown shipping type")

    product_ids = {item.product_id for item in order.order_products}
    products = {p.id: p for p in db.query(models.Product).filter(models.Product.id.in_(product_ids)).all()}
    missing = sorted(product_ids - products.keys())
    if missing:
        raise ValueError(f"unknown product: {', '.join(str(pid) for pid in missing)}")
    out_of_stock = sorted(pid for pid, p in products.items() if not p.in_stock)
    if out_of_stock:
        raise ValueError(f"product out of stock: {', '.join(str(pid) for pid in out_of_stock)}")

    lines = [
        models.OrderProduct(
            product_id=item.product_id,
            qty=item.qty,
            unit_price=round_amount(products[item.product_id].price),
        )
        for item in order.order_products
    ]
    sub_total = round_amount(sum((line.unit_price * line.qty for line in lines), Decimal("0")))

    db_order = models.Order(
        user_id=user_id,
        shipping_type_id=shipping_type.id,
        order_sub_total=sub_total,
        order_tax=round_amount(order.order_tax),
        order_shipping_cost=round_amount(shipping_type.price),
        order_products=lines,
        **order.billing.as_columns("billing"),
        **order.shipping.as_columns("shipping"),
    )
    db.add(db_order)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise ValueError("integrity error") from e
    db.refresh(db_order)
    return db_order


def list_orders_for_user(db: Session, user_id: int) -> List[models.Order]:
    return db.query(models.Order).filter(models.Order.user_id == user_id).order_by(models.Order.id).all()


def get_order_for_user(db: Session, order_id: int, user_id: int) -> Optional[models.Order]:
    return db.query(models.Order).filter(models.Order.id == order_id, models.Order.user_id == user_id).first()
