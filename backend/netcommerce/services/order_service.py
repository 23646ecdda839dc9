"""
Order Service

Order store the callback service transitions orders through.

Status changes are compare-and-set: an UPDATE guarded by the statuses the
order may move from. A transition that finds the order already moved reports
False and changes nothing, so duplicate callbacks are harmless.

Writes are not committed here; the caller commits once after all work.
"""
from datetime import datetime
from decimal import Decimal
from typing import Iterable, List, Optional, Protocol
from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from ..db.models import OrderModel, OrderNoteModel, CartItemModel
from ..models.orders import BillingAddress, Order, OrderNote, OrderStatus, PAYABLE_STATUSES

logger = logging.getLogger(__name__)


class OrderStore(Protocol):
    """Operations the gateway needs from whoever owns orders."""

    async def get_order(self, order_id: int) -> Optional[Order]: ...

    async def payment_complete(self, order_id: int, transaction_id: str) -> bool: ...

    async def update_status(
        self,
        order_id: int,
        status: OrderStatus,
        note: Optional[str] = None,
        from_statuses: Iterable[OrderStatus] = (OrderStatus.PENDING,),
    ) -> bool: ...

    async def add_order_note(self, order_id: int, note: str) -> None: ...

    async def empty_cart(self, session_id: str) -> int: ...

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...


def _to_order(row: OrderModel, notes: List[OrderNoteModel]) -> Order:
    return Order(
        id=row.id,
        status=OrderStatus(row.status),
        total=Decimal(row.total),
        currency=row.currency,
        customer_id=row.customer_id,
        cart_session_id=row.cart_session_id,
        payment_reference=row.payment_reference,
        billing=BillingAddress(
            first_name=row.billing_first_name,
            last_name=row.billing_last_name,
            email=row.billing_email,
            phone=row.billing_phone,
            address_1=row.billing_address_1,
            address_2=row.billing_address_2,
            city=row.billing_city,
            state=row.billing_state,
            postcode=row.billing_postcode,
            country=row.billing_country,
        ),
        notes=[OrderNote(note=n.note, created_at=n.created_at) for n in notes],
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class SqlOrderStore:
    """OrderStore backed by the orders, order_notes and cart_items tables."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ------------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------------

    async def get_order(self, order_id: int) -> Optional[Order]:
        result = await self.db.execute(
            select(OrderModel)
            .where(OrderModel.id == order_id)
            .execution_options(populate_existing=True)
        )
        row = result.scalar_one_or_none()

        if not row:
            return None

        notes = await self.db.execute(
            select(OrderNoteModel)
            .where(OrderNoteModel.order_id == order_id)
            .order_by(OrderNoteModel.id)
        )

        return _to_order(row, list(notes.scalars().all()))

    # ------------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------------

    async def _compare_and_set(
        self,
        order_id: int,
        from_statuses: Iterable[OrderStatus],
        **values
    ) -> bool:
        allowed = [OrderStatus(s).value for s in from_statuses]
        result = await self.db.execute(
            update(OrderModel)
            .where(OrderModel.id == order_id, OrderModel.status.in_(allowed))
            .values(updated_at=datetime.utcnow(), **values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def payment_complete(self, order_id: int, transaction_id: str) -> bool:
        """
        Mark an order paid, storing the processor's transaction id.

        Returns:
            True if this call moved the order to paid
        """
        changed = await self._compare_and_set(
            order_id,
            PAYABLE_STATUSES,
            status=OrderStatus.PAID.value,
            payment_reference=transaction_id,
        )

        if changed:
            logger.info(f"Order {order_id} marked paid, payment_reference={transaction_id}")
        else:
            logger.debug(f"Order {order_id} not payable, payment_complete skipped")

        return changed

    async def update_status(
        self,
        order_id: int,
        status: OrderStatus,
        note: Optional[str] = None,
        from_statuses: Iterable[OrderStatus] = (OrderStatus.PENDING,),
    ) -> bool:
        """
        Move an order to status if it is currently in one of from_statuses.

        The note is only recorded when the status actually changed.
        """
        status = OrderStatus(status)
        changed = await self._compare_and_set(order_id, from_statuses, status=status.value)

        if changed:
            logger.info(f"Order {order_id} status changed to {status.value}")
            if note:
                await self.add_order_note(order_id, note)

        return changed

    async def add_order_note(self, order_id: int, note: str) -> None:
        self.db.add(OrderNoteModel(order_id=order_id, note=note))
        await self.db.flush()

    # ------------------------------------------------------------------------
    # Cart
    # ------------------------------------------------------------------------

    async def empty_cart(self, session_id: str) -> int:
        """Remove all pending cart lines of a buyer session."""
        result = await self.db.execute(
            delete(CartItemModel)
            .where(CartItemModel.session_id == session_id)
            .execution_options(synchronize_session=False)
        )
        logger.debug(f"Emptied cart for session {session_id}: {result.rowcount} items")
        return result.rowcount

    # ------------------------------------------------------------------------
    # Seeding helpers
    #
    # Orders and carts belong to the checkout host. These are not part of
    # OrderStore and only back demo seeding and tests.
    # ------------------------------------------------------------------------

    async def create_order(
        self,
        order_id: int,
        total: Decimal,
        currency: str = "USD",
        billing: Optional[BillingAddress] = None,
        customer_id: Optional[int] = None,
        cart_session_id: Optional[str] = None,
        status: OrderStatus = OrderStatus.PENDING,
    ) -> Order:
        """Insert an order record and return it."""
        billing = billing or BillingAddress()
        self.db.add(OrderModel(
            id=order_id,
            status=OrderStatus(status).value,
            total=str(Decimal(str(total))),
            currency=currency,
            customer_id=customer_id,
            cart_session_id=cart_session_id,
            billing_first_name=billing.first_name,
            billing_last_name=billing.last_name,
            billing_email=billing.email,
            billing_phone=billing.phone,
            billing_address_1=billing.address_1,
            billing_address_2=billing.address_2,
            billing_city=billing.city,
            billing_state=billing.state,
            billing_postcode=billing.postcode,
            billing_country=billing.country,
        ))
        await self.db.flush()

        logger.info(f"Created order {order_id}: total={total} {currency}")

        return await self.get_order(order_id)

    async def add_cart_item(self, session_id: str, product_id: str, quantity: int = 1) -> None:
        """Put a line in a buyer session's pending cart."""
        self.db.add(CartItemModel(session_id=session_id, product_id=product_id, quantity=quantity))
        await self.db.flush()

    async def count_cart_items(self, session_id: str) -> int:
        result = await self.db.execute(
            select(CartItemModel).where(CartItemModel.session_id == session_id)
        )
        return len(result.scalars().all())

    # ------------------------------------------------------------------------
    # Unit of work
    # ------------------------------------------------------------------------

    async def commit(self) -> None:
        await self.db.commit()

    async def rollback(self) -> None:
        await self.db.rollback()
