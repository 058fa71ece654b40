"""Order status changes by vendors and admins — command and handler."""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from marketplace.access import Role
from marketplace.domain import marketplace
from marketplace.errors import AccessDenied
from marketplace.order.order import Order, OrderStatus

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Order")
class UpdateOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, max_length=20)
    actor_id = Identifier(required=True)
    actor_role = String(required=True, choices=Role)


@marketplace.command_handler(part_of=Order)
class UpdateOrderStatusHandler:
    @handle(UpdateOrderStatus)
    def update_order_status(self, command):
        # Unknown values are rejected before anything is read or written
        target = OrderStatus.parse(command.status)

        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)

        role = Role(command.actor_role)
        if role is Role.CUSTOMER:
            raise AccessDenied("Forbidden")
        if role is Role.VENDOR and not order.has_items_from(command.actor_id):
            raise AccessDenied("Not authorized for this order")

        order.change_status(target.value, changed_by=command.actor_id)
        repo.add(order)

        logger.info(
            "Order status updated",
            order_id=str(order.id),
            status=target.value,
            actor_role=command.actor_role,
        )
        return target.value
