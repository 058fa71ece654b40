"""Domain events for the Product aggregate."""

from protean.fields import Float, Identifier, String

from marketplace.domain import marketplace


@marketplace.event(part_of="Product")
class ProductListed:
    """A vendor put a new product on sale."""

    __version__ = 1

    product_id = Identifier(required=True)
    vendor_id = Identifier(required=True)
    name = String(required=True)
    price = Float(required=True)


@marketplace.event(part_of="Product")
class ProductPriceChanged:
    __version__ = 1

    product_id = Identifier(required=True)
    previous_price = Float(required=True)
    new_price = Float(required=True)


@marketplace.event(part_of="Product")
class ProductDeactivated:
    __version__ = 1

    product_id = Identifier(required=True)
