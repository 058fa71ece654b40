"""Vendor product management — listing products and changing them.

Stock is not a product attribute. It lives in the inventory ledger, and these
handlers write it through ``set_stock``.
"""

import structlog
from protean import handle
from protean.fields import Boolean, Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from marketplace.catalogue.product import Product
from marketplace.domain import marketplace
from marketplace.inventory.record import InventoryRecord

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Product")
class ListProduct:
    vendor_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    price = Float(required=True, min_value=0.0)
    stock_quantity = Integer(default=0, min_value=0)
    is_active = Boolean(default=True)


@marketplace.command(part_of="Product")
class UpdateProduct:
    vendor_id = Identifier(required=True)
    product_id = Identifier(required=True)
    price = Float(min_value=0.0)
    stock_quantity = Integer(min_value=0)
    is_active = Boolean()


@marketplace.command_handler(part_of=Product)
class ProductListingHandler:
    @handle(ListProduct)
    def list_product(self, command):
        product = Product.create(
            vendor_id=command.vendor_id,
            name=command.name,
            price=command.price,
            is_active=command.is_active if command.is_active is not None else True,
        )
        current_domain.repository_for(Product).add(product)
        current_domain.repository_for(InventoryRecord).set_stock(str(product.id), command.stock_quantity or 0)

        logger.info("Product listed", product_id=str(product.id), vendor_id=str(command.vendor_id))
        return str(product.id)

    @handle(UpdateProduct)
    def update_product(self, command):
        repo = current_domain.repository_for(Product)
        ledger = current_domain.repository_for(InventoryRecord)

        product = repo.get(command.product_id)
        product.assert_owned_by(command.vendor_id)

        if command.price is not None and command.price != product.price:
            product.change_price(command.price)

        if command.is_active is True:
            product.activate()
        elif command.is_active is False:
            product.deactivate()

        repo.add(product)

        # A withdrawn product has nothing left to sell
        if command.is_active is False:
            ledger.set_stock(str(product.id), 0)
        elif command.stock_quantity is not None:
            ledger.set_stock(str(product.id), command.stock_quantity)

        logger.info("Product updated", product_id=str(product.id))
