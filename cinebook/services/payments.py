"""
Payment gateways.

Every back-end exposes ``charge(amount, payer_info) -> PaymentReceipt``.
``payer_info`` is an opaque string each gateway reads its own way:
"cardNumber,cvv" for cards, an email for PayPal, an account number for
bank transfers. The bundled gateways simulate an approving processor.
"""
import logging
import time
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class PaymentMethod(Enum):
    CREDIT_CARD = "credit_card"
    PAYPAL = "paypal"
    BANK_TRANSFER = "bank_transfer"

    @classmethod
    def parse(cls, tag):
        """Unrecognised tags fall back to CREDIT_CARD."""
        if isinstance(tag, cls):
            return tag
        key = str(tag or "").strip().lower().replace("-", "_").replace(" ", "_")
        for method in cls:
            if key in (method.value, method.name.lower()):
                return method
        return cls.CREDIT_CARD


@dataclass(frozen=True)
class PaymentReceipt:
    method: PaymentMethod
    transaction_id: str
    success: bool
    status_message: str

    def to_dict(self):
        return {
            "method": self.method.value,
            "transaction_id": self.transaction_id,
            "success": self.success,
            "status_message": self.status_message,
        }


class PaymentGateway:
    method = None
    prefix = "TX"
    label = "Payment"

    def __init__(self):
        self.last_transaction_id = None

    def charge(self, amount, payer_info):
        success = self._process(amount, payer_info or "")
        self.last_transaction_id = f"{self.prefix}-{int(time.time() * 1000)}"
        status = f"Payment Successful via {self.label}" if success else "Payment Failed"
        return PaymentReceipt(self.method, self.last_transaction_id, success, status)

    def _process(self, amount, payer_info):
        raise NotImplementedError


class CreditCardGateway(PaymentGateway):
    method = PaymentMethod.CREDIT_CARD
    prefix = "CC"
    label = "Credit Card"

    def _process(self, amount, payer_info):
        parts = payer_info.split(",")
        card_number = parts[0].strip() if parts[0].strip() else "XXXX"
        logger.info("Processing credit card payment of %.2f for card ending %s",
                    amount, card_number[-4:])
        return True


class PayPalGateway(PaymentGateway):
    method = PaymentMethod.PAYPAL
    prefix = "PP"
    label = "PayPal"

    def _process(self, amount, payer_info):
        logger.info("Processing PayPal payment of %.2f for %s", amount, payer_info)
        return True


class BankTransferGateway(PaymentGateway):
    method = PaymentMethod.BANK_TRANSFER
    prefix = "BT"
    label = "Bank Transfer"

    def _process(self, amount, payer_info):
        logger.info("Processing bank transfer of %.2f from account %s", amount, payer_info)
        return True


GATEWAYS = {
    PaymentMethod.CREDIT_CARD: CreditCardGateway,
    PaymentMethod.PAYPAL: PayPalGateway,
    PaymentMethod.BANK_TRANSFER: BankTransferGateway,
}


def create_gateway(method):
    return GATEWAYS.get(PaymentMethod.parse(method), CreditCardGateway)()


def _log_late_charge(method, future):
    if future.cancelled():
        return
    error = future.exception()
    if error is not None:
        logger.error("Abandoned %s charge failed late: %s", method.value, error)
        return
    receipt = future.result()
    if receipt.success:
        logger.warning("Abandoned %s charge completed after timeout, reconcile transaction %s",
                       method.value, receipt.transaction_id)


def charge_with_timeout(gateway, amount, payer_info, timeout):
    """
    Charge through ``gateway`` waiting at most ``timeout`` seconds.

    A timeout or an exception raised by the gateway yields a failed
    receipt; callers never commit on anything but ``success=True``.
    Each charge gets its own worker, so processors that hang cannot hold
    up later charges. A charge abandoned on timeout keeps running; if it
    still succeeds its transaction id is logged for reconciliation.
    """
    method = gateway.method or PaymentMethod.CREDIT_CARD
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="payment")
    future = executor.submit(gateway.charge, amount, payer_info)
    executor.shutdown(wait=False)
    try:
        return future.result(timeout=timeout)
    except FutureTimeout:
        logger.warning("%s gateway timed out after %ss", method.value, timeout)
        future.add_done_callback(lambda done: _log_late_charge(method, done))
        return PaymentReceipt(method, "", False, "Payment timed out")
    except Exception:
        logger.exception("%s gateway raised during charge", method.value)
        return PaymentReceipt(method, "", False, "Payment Failed")
