"""
Services package for business logic layer.

Only the external API clients are re-exported here; workflow services
import repositories and are imported from their own modules.
"""
from orderdesk.services.airtable_client import AirtableClient
from orderdesk.services.easypost_client import EasyPostClient
from orderdesk.services.notification_service import NotificationService
from orderdesk.services.payment_cache import PaymentStatusCache
from orderdesk.services.stripe_client import StripeClient

__all__ = [
    "AirtableClient",
    "StripeClient",
    "EasyPostClient",
    "NotificationService",
    "PaymentStatusCache",
]
