"""Static product catalog and server-side price lookup."""

from decimal import Decimal
from typing import Optional, Sequence

from .errors import InvalidCartError
from .models import CartItem, Product
from .pricing import ORDER_BUMP_PRICE

# Prices are kept in the pt-BR notation the catalog was authored in.
_RAW_PRODUCTS = [
    {
        "name": "VF Desodorante Colônia 75 ml",
        "reviews": 457,
        "rating": 4.21,
        "price": " 87,00",
        "oldPrice": "329,00",
        "image": "/product/p1.jpeg",
        "description": "A fragrância que entrega a sua melhor versão sem esforço.",
    },
    {
        "name": "Heaven Desodorante Colônia 100ml",
        "reviews": 870,
        "rating": 4.71,
        "price": "87,00",
        "oldPrice": "329,00",
        "image": "/product/p2.jpeg",
        "description": "A fragrância que faz você se sentir pura, leve e absolutamente encantadora.",
    },
    {
        "name": "VF Bloom Desodorante Colônia 75 ml",
        "reviews": 1123,
        "rating": 4.93,
        "price": "87,00",
        "oldPrice": "329,00",
        "image": "/product/p3.jpeg",
        "description": "O perfume que floresce na sua pele.",
    },
    {
        "name": "Celebrate Life Desodorante Colônia 100ml",
        "reviews": 3441,
        "rating": 4.73,
        "price": "89,90",
        "oldPrice": "339,00",
        "image": "/product/p4.jpeg",
        "description": "O aroma que celebra quem você é.",
    },
    {
        "name": "Liberté Desodorante Colônia 100ml",
        "reviews": 4218,
        "rating": 4.99,
        "price": "89,90",
        "oldPrice": "329,00",
        "image": "/product/p5.jpeg",
        "description": "Sua liberdade tem um cheiro… e ele é inesquecível.",
    },
    {
        "name": "Body Cream Infinity Desodorante Hidratante 200ml",
        "reviews": 3221,
        "rating": 4.99,
        "price": "34,90",
        "oldPrice": "107,00",
        "image": "/product/p6.jpeg",
        "description": "Pele macia, perfumada e simplesmente inesquecível",
    },
    {
        "name": "Body Cream One Touch Desodorante Hidratante 200ml",
        "reviews": 1651,
        "rating": 4.60,
        "price": "34,90",
        "oldPrice": "107,00",
        "image": "/product/bdot.jpeg",
        "description": "Um toque e você se apaixona pelo próprio cheiro.",
    },
    {
        "name": "Body Cream Celebrate Life Desodorante Hidratante 200ml",
        "reviews": 2871,
        "rating": 4.80,
        "price": "34,90",
        "oldPrice": "107,00",
        "image": "/product/bdc.jpeg",
        "description": "A energia que sua pele sente. A vibe que você espalha.",
    },
]


def parse_brl(text) -> Decimal:
    """'1.234,56' -> Decimal('1234.56')"""
    if isinstance(text, Decimal):
        return text
    cleaned = str(text or "0").strip().replace(".", "").replace(",", ".")
    return Decimal(cleaned or "0")


def _build_catalog() -> dict[str, Product]:
    products = {}
    for index, raw in enumerate(_RAW_PRODUCTS, start=1):
        product_id = raw.get("id") or f"prod_{index:02d}"
        products[product_id] = Product(
            id=product_id,
            name=raw["name"],
            price=parse_brl(raw["price"]),
            old_price=parse_brl(raw["oldPrice"]) if raw.get("oldPrice") else None,
            category=raw.get("category", "Geral"),
            image=raw.get("image"),
            rating=raw.get("rating", 5),
            reviews=raw.get("reviews", 0),
            description=raw.get("description", ""),
        )
    return products


CATALOG = _build_catalog()

ORDER_BUMP_PRODUCT = Product(
    id="bump_01",
    name="Esponja de Maquiagem Soft Blender",
    price=ORDER_BUMP_PRICE,
    image="/product/esponja.jpeg",
)


def list_products() -> list[Product]:
    return list(CATALOG.values())


def get_product(product_id) -> Optional[Product]:
    return CATALOG.get(str(product_id))


def reprice_cart(cart: Sequence[CartItem]) -> list[CartItem]:
    """Replace client-submitted unit prices with the catalog's."""
    repriced = []
    for item in cart:
        product = get_product(item.external_ref)
        if product is None:
            raise InvalidCartError(f"Unknown product: {item.external_ref}")
        repriced.append(item.model_copy(update={"price": product.price, "name": product.name}))
    return repriced
