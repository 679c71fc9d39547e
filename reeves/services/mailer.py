import asyncio
import logging

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..config import settings
from ..models.reservation_model import Reservation

logger = logging.getLogger(__name__)

CONFIRMATION_SUBJECT = "Your Reservation is Confirmed!"


def send_email_ses(to_email: str, subject: str, text_body: str) -> bool:
    ses_client = boto3.client(
        "ses",
        region_name=settings.AWS_REGION,
        aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
        aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
    )

    try:
        response = ses_client.send_email(
            Source=settings.SES_SENDER_EMAIL,
            Destination={"ToAddresses": [to_email]},
            Message={
                "Subject": {"Data": subject, "Charset": "UTF-8"},
                "Body": {"Text": {"Data": text_body, "Charset": "UTF-8"}},
            },
        )
        logger.info(f"SES email sent to {to_email}: {response.get('MessageId')}")
        return True
    except ClientError as e:
        logger.error(f"SES error sending to {to_email}: {e.response['Error']['Message']}")
        return False
    except BotoCoreError as e:
        logger.error(f"SES unavailable sending to {to_email}: {e}")
        return False


def confirmation_message(reservation: Reservation) -> str:
    lines = [
        f"Hello {reservation.name},",
        "",
        f"Your reservation for {reservation.date.isoformat()} at {reservation.time} "
        "has been confirmed by Reeves Dining.",
        "",
        f"Guests: {reservation.guests}",
    ]
    if reservation.special_requests:
        lines.append(f"Special Requests: {reservation.special_requests}")
    lines += ["", "We look forward to serving you!", "", "Thank you!"]
    return "\n".join(lines)


# ----------------------------------------
# RESERVATION CONFIRMATION
# ----------------------------------------
async def send_reservation_confirmation(reservation: Reservation) -> bool:
    """Email the guest; failures are logged, never raised to the admin."""
    body = confirmation_message(reservation)

    if not settings.SES_SENDER_EMAIL:
        # local mode: no sender configured
        logger.info(f"Reservation confirmation (local) to {reservation.email}:\n{body}")
        return True

    return await asyncio.to_thread(send_email_ses, reservation.email, CONFIRMATION_SUBJECT, body)


def get_mailer():
    return send_reservation_confirmation
