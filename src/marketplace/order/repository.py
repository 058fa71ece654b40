"""Repository for the Order aggregate, with the read paths the views need."""

from marketplace.domain import marketplace
from marketplace.order.order import Order, OrderStatus

PAGE_SIZE = 100


@marketplace.repository(part_of=Order)
class OrderRepository:
    def number_taken(self, order_number) -> bool:
        return bool(self._dao.query.filter(order_number=order_number).all().items)

    def _every(self, queryset):
        """Walk a queryset page by page and yield every match."""
        offset = 0
        while True:
            page = queryset.offset(offset).limit(PAGE_SIZE).all()
            yield from page.items
            if offset + PAGE_SIZE >= page.total:
                return
            offset += PAGE_SIZE

    def for_customer(self, customer_id) -> list[Order]:
        """The customer's orders, newest first."""
        queryset = self._dao.query.filter(customer_id=str(customer_id)).order_by("-created_at")
        return list(self._every(queryset))

    def with_items_from(self, vendor_id) -> list[Order]:
        """Orders holding at least one of the vendor's items, newest first."""
        queryset = self._dao.query.order_by("-created_at")
        return [order for order in self._every(queryset) if order.has_items_from(vendor_id)]

    def everything(self) -> list[Order]:
        return list(self._every(self._dao.query.order_by("-created_at")))

    def delivered_for(self, customer_id) -> list[Order]:
        queryset = self._dao.query.filter(
            customer_id=str(customer_id),
            status=OrderStatus.DELIVERED.value,
        )
        return list(self._every(queryset))
