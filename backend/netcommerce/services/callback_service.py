"""
Callback Service

Applies a verified NetCommerce callback to the order store and decides
where the buyer goes next.

Rules:
- Rejected callbacks change nothing and send the buyer to the cart
- Approved: order paid, audit note, cart emptied
- Declined: order failed with a reason
- Other result codes follow the configured UnmappedResultPolicy
- Each order is handled under its own lock, and transitions are
  compare-and-set, so retried deliveries never apply twice
"""
import asyncio
import logging
from collections import defaultdict
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator, Dict, Mapping

from ..models.gateway import GatewayConfig, UnmappedResultPolicy
from ..models.orders import OrderStatus
from ..models.transactions import (
    Accepted,
    RejectReason,
    Rejected,
    ResultCode,
    VerificationResult,
)
from .callback_verifier import verify_callback
from .order_service import OrderStore

logger = logging.getLogger(__name__)


APPROVED_NOTE = "NetCommerce payment approved (Order ID: {order_id}, NetCommerce Authorization Number: {authorization_number})"
DECLINED_NOTE = "Payment was declined by NetCommerce."
ON_HOLD_NOTE = "NetCommerce returned an unrecognised result (RespVal: {result_value}, RespMsg: {result_message})."


class OrderLocks:
    """Registry of asyncio locks, one per order id, dropped when idle."""

    def __init__(self):
        self._locks: Dict[int, asyncio.Lock] = {}
        self._waiters: Dict[int, int] = defaultdict(int)

    @asynccontextmanager
    async def hold(self, order_id: int) -> AsyncIterator[None]:
        lock = self._locks.setdefault(order_id, asyncio.Lock())
        self._waiters[order_id] += 1
        try:
            async with lock:
                yield
        finally:
            self._waiters[order_id] -= 1
            if not self._waiters[order_id]:
                del self._waiters[order_id]
                self._locks.pop(order_id, None)

    def __len__(self) -> int:
        return len(self._locks)


order_locks = OrderLocks()


@dataclass(frozen=True)
class CallbackOutcome:
    """What happened to a callback, and where to send the buyer."""
    result: VerificationResult
    redirect_url: str
    transitioned: bool = False

    @property
    def accepted(self) -> bool:
        return isinstance(self.result, Accepted)


async def apply_verified_callback(
    store: OrderStore,
    result: Accepted,
    gateway: GatewayConfig,
) -> CallbackOutcome:
    """
    Transition the order a verified callback refers to.

    Args:
        store: Order store
        result: Accepted verification result
        gateway: Gateway configuration (URLs, unmapped result policy)

    Returns:
        CallbackOutcome redirecting to the order confirmation page, or to
        the cart when the order is unknown or the result code is rejected
        by policy
    """
    order_id = result.order_id

    async with order_locks.hold(order_id):
        order = await store.get_order(order_id)

        if order is None:
            logger.warning(f"NetCommerce callback for unknown order {order_id} (txtIndex={result.order_reference})")
            return CallbackOutcome(
                result=Rejected(reason=RejectReason.ORDER_NOT_FOUND, order_id=order_id),
                redirect_url=gateway.cart_url(),
            )

        transitioned = False

        try:
            if result.result_code is ResultCode.APPROVED:
                transitioned = await store.payment_complete(order_id, result.authorization_number)
                if transitioned:
                    await store.add_order_note(order_id, APPROVED_NOTE.format(
                        order_id=order_id,
                        authorization_number=result.authorization_number,
                    ))
                    if order.cart_session_id:
                        await store.empty_cart(order.cart_session_id)
                else:
                    logger.info(f"Duplicate approval for order {order_id} ignored (status={order.status.value})")

            elif result.result_code is ResultCode.DECLINED:
                transitioned = await store.update_status(
                    order_id,
                    OrderStatus.FAILED,
                    DECLINED_NOTE,
                    from_statuses=(OrderStatus.PENDING, OrderStatus.ON_HOLD),
                )
                if not transitioned:
                    logger.info(f"Decline for order {order_id} ignored (status={order.status.value})")

            else:
                policy = gateway.unmapped_result_policy
                logger.warning(
                    f"Unmapped NetCommerce result for order {order_id}: "
                    f"RespVal={result.result_value!r}, policy={policy.value}"
                )

                if policy is UnmappedResultPolicy.REJECT:
                    return CallbackOutcome(
                        result=Rejected(
                            reason=RejectReason.UNMAPPED_RESULT,
                            order_id=order_id,
                            detail={"RespVal": result.result_value},
                        ),
                        redirect_url=gateway.cart_url(),
                    )

                if policy is UnmappedResultPolicy.ON_HOLD:
                    transitioned = await store.update_status(
                        order_id,
                        OrderStatus.ON_HOLD,
                        ON_HOLD_NOTE.format(
                            result_value=result.result_value,
                            result_message=result.result_message,
                        ),
                        from_statuses=(OrderStatus.PENDING,),
                    )

            await store.commit()

        except Exception:
            await store.rollback()
            raise

    return CallbackOutcome(
        result=result,
        redirect_url=gateway.order_received_url(order_id),
        transitioned=transitioned,
    )


async def process_callback(
    store: OrderStore,
    payload: Mapping[str, Any],
    gateway: GatewayConfig,
) -> CallbackOutcome:
    """
    Verify a callback and apply it.

    Args:
        store: Order store
        payload: Form fields posted by NetCommerce
        gateway: Gateway configuration holding the sha_key

    Returns:
        CallbackOutcome; rejected callbacks redirect to the cart
    """
    result = verify_callback(payload, gateway.sha_key)

    if isinstance(result, Rejected):
        return CallbackOutcome(result=result, redirect_url=gateway.cart_url())

    outcome = await apply_verified_callback(store, result, gateway)

    logger.info(
        f"NetCommerce callback handled: order_id={result.order_id}, "
        f"result={result.result_code.value}, transitioned={outcome.transitioned}"
    )

    return outcome
