import logging

from flask import current_app
from flask_mail import Message

from cinebook.extensions import mail

logger = logging.getLogger(__name__)


def notify_refund_required(error, booking_request):
    """E-mail the operator about a captured payment that has no booking."""
    recipient = current_app.config.get("CINEBOOK_OPERATOR_EMAIL")
    if not recipient:
        return False

    msg = Message(f"Refund required: {error.receipt.transaction_id}", recipients=[recipient])
    msg.body = f'''A payment was captured but the booking could not be saved.

Transaction: {error.receipt.transaction_id} ({error.receipt.method.value})
User: {booking_request["user_id"]}
Movie: {booking_request["movie_id"]}
Seats: {", ".join(booking_request["seats"])}
Amount: {booking_request["total"]:.2f}
Reason: {error.cause.message}
'''
    try:
        mail.send(msg)
    except Exception:
        logger.exception("Could not send refund alert for %s", error.receipt.transaction_id)
        return False
    return True
