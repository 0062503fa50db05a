"""
Notification Service - transactional customer email.

Sends order confirmation and shipping notices via the Resend API.
"""
from html import escape
from typing import Optional

import httpx

from orderdesk.core.config import settings
from orderdesk.core.logging import get_logger
from orderdesk.models.order import Order

logger = get_logger(__name__)

USPS_TRACKING_URL = "https://tools.usps.com/go/TrackConfirmAction?qtc_tLabels1={tracking}"


class NotificationService:
    """Customer email for order lifecycle events."""

    RESEND_API_URL = "https://api.resend.com/emails"

    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.resend_api_key = api_key or settings.resend_api_key
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self.resend_api_key)

    async def send_email(
        self,
        to: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None,
    ) -> bool:
        """
        Send email via Resend API.

        Args:
            to: Recipient email address
            subject: Email subject
            html_content: HTML email body
            text_content: Plain text fallback

        Returns:
            True if sent successfully
        """
        if not self.resend_api_key:
            logger.warning("Resend API key not configured, skipping email")
            return False

        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.post(
                    self.RESEND_API_URL,
                    headers={
                        "Authorization": f"Bearer {self.resend_api_key}",
                        "Content-Type": "application/json",
                    },
                    json={
                        "from": settings.email_from,
                        "to": [to],
                        "subject": subject,
                        "html": html_content,
                        "text": text_content or subject,
                    },
                    timeout=10.0,
                )

                if response.status_code == 200:
                    logger.info("Email sent", to=to, subject=subject)
                    return True
                else:
                    logger.error(
                        "Email send failed",
                        status=response.status_code,
                        response=response.text,
                    )
                    return False

        except httpx.HTTPError as e:
            logger.error("Email send error", error=str(e))
            return False

    async def send_order_confirmation(self, order: Order) -> bool:
        if not order.email:
            logger.warning("Order has no email, skipping confirmation", order_id=order.id)
            return False
        html, text = self.format_confirmation_email(order)
        return await self.send_email(
            to=order.email,
            subject=f"Order Confirmation - {order.checkout_id}",
            html_content=html,
            text_content=text,
        )

    async def send_shipping_notification(self, order: Order) -> bool:
        if not order.email:
            logger.warning("Order has no email, skipping shipping notice", order_id=order.id)
            return False
        html, text = self.format_shipping_email(order)
        return await self.send_email(
            to=order.email,
            subject=f"Your Order Has Shipped - {order.checkout_id}",
            html_content=html,
            text_content=text,
        )

    def _items_html(self, order: Order) -> str:
        return "".join(
            f"<li>{escape(item.product.name if item.product else 'Product')} "
            f"({escape(item.selected_weight)}) - Quantity: {item.quantity}</li>"
            for item in order.cart_items
        )

    def _items_text(self, order: Order) -> str:
        return "\n".join(
            f"- {item.product.name if item.product else 'Product'} "
            f"({item.selected_weight}) x {item.quantity}"
            for item in order.cart_items
        )

    def format_confirmation_email(self, order: Order) -> tuple[str, str]:
        """
        Format an order confirmation.

        Returns:
            Tuple of (html_content, text_content)
        """
        name = escape(order.customer_name)
        html = f"""
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
    <h2 style="color: #333;">Order Confirmation</h2>
    <p>Dear {name},</p>
    <p>Thank you for your order! Your order has been confirmed and is being processed.</p>
    <div style="background: #f5f5f5; padding: 15px; margin: 20px 0;">
        <h3>Order Details:</h3>
        <p><strong>Order ID:</strong> {escape(order.checkout_id)}</p>
        <p><strong>Total:</strong> ${order.total:.2f}</p>
        <h4>Items Ordered:</h4>
        <ul>{self._items_html(order)}</ul>
    </div>
    <div style="background: #f5f5f5; padding: 15px; margin: 20px 0;">
        <h3>Shipping Address:</h3>
        <p>{escape(order.address)}<br>{escape(order.city)}, {escape(order.state)} {escape(order.zip)}</p>
    </div>
    <p>We'll send you another email when your order ships.</p>
</div>
"""

        text = f"""
Order Confirmation

Dear {order.customer_name},

Thank you for your order! Order {order.checkout_id} has been confirmed.
Total: ${order.total:.2f}

Items:
{self._items_text(order)}

We'll send you another email when your order ships.
"""
        return html, text

    def format_shipping_email(self, order: Order) -> tuple[str, str]:
        """
        Format a shipping notification, linking the USPS tracker if known.

        Returns:
            Tuple of (html_content, text_content)
        """
        name = escape(order.customer_name)
        tracking_html = ""
        tracking_text = ""
        if order.tracking:
            url = USPS_TRACKING_URL.format(tracking=escape(order.tracking))
            tracking_html = (
                f'<p><strong>Tracking Number:</strong> '
                f'<a href="{url}" style="color: #0066cc;">{escape(order.tracking)}</a></p>'
            )
            tracking_text = f"Tracking number: {order.tracking}\nTrack it: {url}\n"

        html = f"""
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
    <h2 style="color: #333;">Your Order Has Shipped!</h2>
    <p>Dear {name},</p>
    <p>Great news! Your order has been shipped and is on its way to you.</p>
    <div style="background: #f5f5f5; padding: 15px; margin: 20px 0;">
        <h3>Order Details:</h3>
        <p><strong>Order ID:</strong> {escape(order.checkout_id)}</p>
        {tracking_html}
        <h4>Items Shipped:</h4>
        <ul>{self._items_html(order)}</ul>
    </div>
</div>
"""

        text = f"""
Your Order Has Shipped!

Dear {order.customer_name},

Order {order.checkout_id} is on its way.
{tracking_text}
Items:
{self._items_text(order)}
"""
        return html, text
