"""
Example 03: Custom Transformers and Providers

This example demonstrates plugging a transformer factory for a value type
and a provider that hands out already loaded entities.
"""

from dataclasses import dataclass
from decimal import Decimal

from automap import AutoMapper, Configuration


@dataclass(frozen=True)
class Money:
    """Amount in a currency"""
    amount: Decimal
    currency: str


@dataclass
class Product:
    """Catalog entity"""
    id: int
    name: str
    price: Money


@dataclass
class ProductRow:
    """Flat representation"""
    id: int
    name: str
    price: str


class MoneyToString:
    def transform(self, value, context, call):
        return f"{value.amount} {value.currency}"


class StringToMoney:
    def transform(self, value, context, call):
        amount, currency = value.split()
        return Money(Decimal(amount), currency)


class MoneyTransformerFactory:
    """Formats Money as '<amount> <currency>' and parses it back"""

    def get_transformer(self, source_type, target_type, registry):
        if source_type is Money and target_type is str:
            return MoneyToString()
        if source_type is str and target_type is Money:
            return StringToMoney()
        return None


class IdentityMap:
    """Returns the already loaded product with the same id"""

    def __init__(self, products):
        self.products = {product.id: product for product in products}

    def supports(self, source_type, target_type):
        return target_type is Product

    def provide(self, target_type, source, context):
        return self.products.get(source.id)


def main():
    loaded = Product(id=1, name="Pen", price=Money(Decimal("1.50"), "EUR"))
    mapper = AutoMapper(
        Configuration(strict_types=True),
        transformer_factories=[MoneyTransformerFactory()],
        providers=[IdentityMap([loaded])],
    )

    print("=== Custom Transformers ===\n")

    print("1. Entity -> row:")
    row = mapper.map(loaded, ProductRow)
    print(f"   {row}\n")

    print("2. Row -> loaded entity (provider):")
    row.name = "Fountain pen"
    product = mapper.map(row, Product)
    print(f"   Same instance: {product is loaded}")
    print(f"   Name: {product.name}, price: {product.price}\n")

    print("3. Row -> new entity:")
    new = mapper.map(ProductRow(id=2, name="Ink", price="3.20 EUR"), Product)
    print(f"   {new}")


if __name__ == "__main__":
    main()
