"""Demo dataset for development and integration tests.

Rows are inserted without explicit ids in a fixed order, so on an empty
database the generated ids are stable:

    users      1 maria@gmail.com (CLIENT), 2 alex@gmail.com (CLIENT, ADMIN),
               3 ana@gmail.com (ADMIN)
    products   1 The Lord of the Rings, 2 Smart TV, 3 Macbook Pro, ...
    orders     1 Maria PAID, 2 Alex DELIVERED, 3 Maria WAITING_PAYMENT

Every seeded user has the password "123456".
"""

from datetime import date, datetime, timezone
from typing import Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from dscommerce.api.shared.auth import hash_password
from dscommerce.db.models import (
    Category,
    Order,
    OrderItem,
    OrderStatus,
    Payment,
    Product,
    Role,
    RoleName,
    User,
)
from dscommerce.logging_config import get_logger

logger = get_logger(__name__)

SEED_PASSWORD = "123456"

CATEGORIES = ["Livros", "Eletrônicos", "Computadores"]

PRODUCTS = [
    # (name, price, categories)
    ("The Lord of the Rings", 90.5, ["Livros"]),
    ("Smart TV", 2190.0, ["Eletrônicos", "Computadores"]),
    ("Macbook Pro", 1250.0, ["Computadores"]),
    ("PC Gamer", 1200.0, ["Computadores"]),
    ("Rails for Dummies", 100.99, ["Livros"]),
    ("PC Gamer Ex", 1350.0, ["Computadores"]),
    ("PC Gamer X", 1350.0, ["Computadores"]),
    ("PC Gamer Alfa", 1850.0, ["Computadores"]),
]

LOREM = (
    "Lorem ipsum dolor sit amet, consectetur adipiscing elit, sed do eiusmod "
    "tempor incididunt ut labore et dolore magna aliqua."
)


def _utc(year: int, month: int, day: int, hour: int, minute: int = 0) -> datetime:
    return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)


async def seed_database(session: AsyncSession, bcrypt_rounds: Optional[int] = None) -> None:
    """Insert the demo dataset into an empty schema.

    Args:
        session: Session to write through; the caller commits
        bcrypt_rounds: Cost factor for the seeded password hashes
    """
    roles = {
        RoleName.CLIENT: Role(authority=RoleName.CLIENT.value),
        RoleName.ADMIN: Role(authority=RoleName.ADMIN.value),
    }
    session.add_all(roles.values())
    await session.flush()

    password = hash_password(SEED_PASSWORD, rounds=bcrypt_rounds)
    maria = User(
        name="Maria Brown",
        email="maria@gmail.com",
        phone="988888888",
        birth_date=date(2001, 7, 25),
        password=password,
        roles=[roles[RoleName.CLIENT]],
    )
    alex = User(
        name="Alex Green",
        email="alex@gmail.com",
        phone="977777777",
        birth_date=date(1987, 12, 13),
        password=password,
        roles=[roles[RoleName.CLIENT], roles[RoleName.ADMIN]],
    )
    ana = User(
        name="Ana Blue",
        email="ana@gmail.com",
        phone="966666666",
        birth_date=date(1995, 3, 2),
        password=password,
        roles=[roles[RoleName.ADMIN]],
    )
    for user in (maria, alex, ana):
        session.add(user)
        await session.flush()

    categories: Dict[str, Category] = {}
    for name in CATEGORIES:
        categories[name] = Category(name=name)
        session.add(categories[name])
        await session.flush()

    products: List[Product] = []
    for index, (name, price, category_names) in enumerate(PRODUCTS, start=1):
        product = Product(
            name=name,
            description=LOREM,
            price=price,
            img_url=f"https://raw.githubusercontent.com/devsuperior/dscatalog-resources/master/backend/img/{index}-big.jpg",
            categories=[categories[c] for c in category_names],
        )
        session.add(product)
        await session.flush()
        products.append(product)

    lotr, _smart_tv, macbook, pc_gamer = products[:4]

    order_specs = [
        (maria, OrderStatus.PAID, _utc(2022, 7, 25, 13), _utc(2022, 7, 25, 15),
         [(lotr, 2), (macbook, 1)]),
        (alex, OrderStatus.DELIVERED, _utc(2022, 7, 29, 15, 50), _utc(2022, 7, 30, 11),
         [(macbook, 1)]),
        (maria, OrderStatus.WAITING_PAYMENT, _utc(2022, 8, 3, 14, 20), None,
         [(pc_gamer, 1), (lotr, 1)]),
    ]
    for client, status, moment, paid_at, lines in order_specs:
        order = Order(moment=moment, status=status, client=client)
        for product, quantity in lines:
            order.items.append(OrderItem(product=product, quantity=quantity, price=product.price))
        if paid_at is not None:
            order.payment = Payment(moment=paid_at)
        session.add(order)
        await session.flush()

    logger.info(
        "database_seeded",
        users=3,
        categories=len(categories),
        products=len(products),
        orders=len(order_specs),
    )
