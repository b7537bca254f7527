from decimal import Decimal
from typing import Optional
from uuid import UUID
import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.mail import send_mail
from django.template.loader import render_to_string
from django.utils import timezone
from django.utils.html import strip_tags

from core_backend.exceptions import AuthorizationError, NotFoundError
from orders.models import Order
from settings.config import app_settings

from .models import Notification

logger = logging.getLogger(__name__)

NotificationType = Notification.NotificationType

LIST_LIMIT = 50

STATUS_TITLES = {
    Order.OrderStatus.CONFIRMED: "Order Confirmed",
    Order.OrderStatus.PREPARING: "Order Being Prepared",
    Order.OrderStatus.READY: "Order Ready",
    Order.OrderStatus.OUT_FOR_DELIVERY: "Order Out for Delivery",
    Order.OrderStatus.DELIVERED: "Order Delivered",
    Order.OrderStatus.CANCELLED: "Order Cancelled",
}

EMAIL_TEMPLATES = {
    NotificationType.ORDER_CONFIRMED: "emails/order_confirmed.html",
    NotificationType.ORDER_STATUS: "emails/order_status.html",
    NotificationType.DELIVERY_PICKED_UP: "emails/order_status.html",
    NotificationType.DELIVERY_DELIVERED: "emails/order_status.html",
    NotificationType.DELIVERY_ASSIGNED: "emails/delivery_assigned.html",
}
DEFAULT_EMAIL_TEMPLATE = "emails/notification.html"


def user_group_name(user_id) -> str:
    return f"user_{user_id}_notifications"


def convert_payload_to_str(data):
    """
    Recursively converts UUID and Decimal objects in a data structure to strings.
    This prepares the payload for default JSON serialization by the channels library.
    """
    if isinstance(data, dict):
        return {k: convert_payload_to_str(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [convert_payload_to_str(elem) for elem in data]
    elif isinstance(data, (UUID, Decimal)):
        return str(data)
    return data


class EmailService:
    def __init__(self):
        # Format the sender's email to include a display name
        from_email_address = getattr(settings, "DEFAULT_FROM_EMAIL", "orders@restaurant.local")
        self.default_from_email = f"{app_settings.restaurant_name} <{from_email_address}>"

    def send_email(self, recipient_list, subject, template_name, context):
        """
        Sends an email using a Django template.

        Args:
            recipient_list (list): A list of recipient email addresses.
            subject (str): The subject of the email.
            template_name (str): The path to the email template (e.g., 'emails/order_confirmed.html').
            context (dict): A dictionary of data to render in the template.
        """
        html_message = render_to_string(template_name, context)
        send_mail(
            subject,
            strip_tags(html_message),
            self.default_from_email,
            recipient_list,
            html_message=html_message,
            fail_silently=False,
        )


class SmsService:
    """
    SMS transport. No provider is wired in yet, so outgoing messages are
    written to the log.
    """

    def send_sms(self, phone_number, message):
        logger.info(f"SMS to {phone_number}: {message}")
        return True


class PushService:
    """Pushes notifications to the customer's channel group."""

    def send(self, user_id, payload):
        channel_layer = get_channel_layer()
        if not channel_layer:
            logger.warning("Channel layer not available. Cannot push notification.")
            return False

        async_to_sync(channel_layer.group_send)(
            user_group_name(user_id),
            {"type": "notification_message", "notification": convert_payload_to_str(payload)},
        )
        return True


class NotificationService:
    """
    Creates inbox notifications and fans them out to email, SMS and push.

    Delivery is best effort: a transport failure is logged and recorded by
    leaving its ``*_sent`` flag unset, and never reaches the caller.
    """

    @staticmethod
    def _order_link(order: Optional[Order]) -> str:
        return f"/orders/{order.id}" if order else ""

    @staticmethod
    def create_notification(
        user_id,
        type: str,
        title: str,
        message: str,
        order: Optional[Order] = None,
        link: Optional[str] = None,
        email: Optional[str] = None,
        phone: Optional[str] = None,
    ) -> Optional[Notification]:
        """
        Record a notification for ``user_id`` and send it on every enabled
        channel. Returns None without doing anything when there is no user
        or no channel to deliver on.
        """
        if not user_id:
            logger.debug(f"Skipping {type} notification: no user")
            return None

        send_email = bool(email) and app_settings.enable_email_notifications
        send_sms = bool(phone) and app_settings.enable_sms_notifications
        send_push = getattr(settings, "NOTIFICATIONS_PUSH_ENABLED", True)
        if not (send_email or send_sms or send_push):
            logger.debug(f"Skipping {type} notification for user {user_id}: no channel enabled")
            return None

        if link is None:
            link = NotificationService._order_link(order)

        notification = Notification.objects.create(
            user_id=str(user_id),
            order=order,
            type=type,
            title=title,
            message=message,
            link=link,
        )

        sent_fields = []
        if send_email and NotificationService._send_email(notification, email):
            notification.email_sent = True
            notification.email_sent_at = timezone.now()
            sent_fields += ["email_sent", "email_sent_at"]
        if send_sms and NotificationService._send_sms(notification, phone):
            notification.sms_sent = True
            notification.sms_sent_at = timezone.now()
            sent_fields += ["sms_sent", "sms_sent_at"]
        if send_push and NotificationService._send_push(notification):
            notification.push_sent = True
            notification.push_sent_at = timezone.now()
            sent_fields += ["push_sent", "push_sent_at"]

        if sent_fields:
            notification.save(update_fields=sent_fields)

        logger.info(f"Notification {notification.type} created for user {notification.user_id}")
        return notification

    @staticmethod
    def _send_email(notification: Notification, email: str) -> bool:
        link = notification.link
        context = {
            "notification": notification,
            "order": notification.order,
            "restaurant_name": app_settings.restaurant_name,
            "order_url": f"{settings.FRONTEND_BASE_URL}{link}" if link else "",
        }
        template_name = EMAIL_TEMPLATES.get(notification.type, DEFAULT_EMAIL_TEMPLATE)
        if notification.order is None:
            template_name = DEFAULT_EMAIL_TEMPLATE

        try:
            EmailService().send_email(
                recipient_list=[email],
                subject=notification.title,
                template_name=template_name,
                context=context,
            )
        except Exception as e:
            logger.error(f"Failed to send email for notification {notification.id}: {e}", exc_info=True)
            return False
        return True

    @staticmethod
    def _send_sms(notification: Notification, phone: str) -> bool:
        try:
            return SmsService().send_sms(phone, notification.message)
        except Exception as e:
            logger.error(f"Failed to send SMS for notification {notification.id}: {e}", exc_info=True)
            return False

    @staticmethod
    def _send_push(notification: Notification) -> bool:
        payload = {
            "id": notification.id,
            "type": notification.type,
            "title": notification.title,
            "message": notification.message,
            "link": notification.link,
            "order_id": notification.order_id,
            "created_at": notification.created_at.isoformat(),
        }
        try:
            return PushService().send(notification.user_id, payload)
        except Exception as e:
            logger.error(f"Failed to push notification {notification.id}: {e}", exc_info=True)
            return False

    # ------------------------------------------------------------------
    # Lifecycle events
    # ------------------------------------------------------------------

    @staticmethod
    def _notify_order(order: Order, notification_type: str, title: str, message: str) -> Optional[Notification]:
        return NotificationService.create_notification(
            user_id=order.user_id,
            type=notification_type,
            title=title,
            message=message,
            order=order,
            email=order.customer_email,
            phone=order.customer_phone,
        )

    @staticmethod
    def notify_order_status(order: Order, status: Optional[str] = None) -> Optional[Notification]:
        status = status or order.status
        title = STATUS_TITLES.get(status)
        if title is None:
            return None

        if status == Order.OrderStatus.CONFIRMED:
            return NotificationService._notify_order(
                order,
                NotificationType.ORDER_CONFIRMED,
                title,
                f"Your order #{order.order_number} has been confirmed. Total: ${order.total:.2f}",
            )

        notification_type = NotificationType.ORDER_STATUS
        if order.order_type == Order.OrderType.DELIVERY:
            if status == Order.OrderStatus.OUT_FOR_DELIVERY:
                notification_type = NotificationType.DELIVERY_PICKED_UP
            elif status == Order.OrderStatus.DELIVERED:
                notification_type = NotificationType.DELIVERY_DELIVERED

        label = Order.OrderStatus(status).label
        return NotificationService._notify_order(
            order,
            notification_type,
            title,
            f"Your order #{order.order_number} status has been updated to {label}.",
        )

    @staticmethod
    def _driver_name(driver_id) -> Optional[str]:
        User = get_user_model()
        try:
            driver = User.objects.filter(pk=driver_id).first()
        except (ValueError, DjangoValidationError):
            return None
        if driver is None:
            return None
        return driver.get_full_name() or driver.get_username()

    @staticmethod
    def notify_delivery_assigned(delivery) -> Optional[Notification]:
        order = delivery.order
        name = NotificationService._driver_name(delivery.driver_id)
        driver = f"A driver ({name})" if name else "A driver"
        return NotificationService._notify_order(
            order,
            NotificationType.DELIVERY_ASSIGNED,
            "Delivery Assigned",
            f"{driver} has been assigned to deliver your order #{order.order_number}.",
        )

    @staticmethod
    def notify_delivery_failed(delivery) -> Optional[Notification]:
        order = delivery.order
        return NotificationService._notify_order(
            order,
            NotificationType.DELIVERY_FAILED,
            "Delivery Problem",
            f"We couldn't complete the delivery of your order #{order.order_number}. "
            f"We will contact you shortly.",
        )

    @staticmethod
    def notify_payment(payment, success: bool) -> Optional[Notification]:
        order = payment.order
        if success:
            return NotificationService._notify_order(
                order,
                NotificationType.PAYMENT_RECEIVED,
                "Payment Received",
                f"We received your payment of ${payment.amount:.2f} for order #{order.order_number}.",
            )

        reason = payment.failure_reason or "Please try another payment method."
        return NotificationService._notify_order(
            order,
            NotificationType.PAYMENT_FAILED,
            "Payment Failed",
            f"Your payment for order #{order.order_number} could not be processed. {reason}",
        )

    # ------------------------------------------------------------------
    # Inbox
    # ------------------------------------------------------------------

    @staticmethod
    def list_for_user(user_id, unread_only: bool = False, limit: int = LIST_LIMIT, offset: int = 0):
        queryset = Notification.objects.filter(user_id=str(user_id)).select_related("order")
        if unread_only:
            queryset = queryset.filter(read=False)
        return queryset.order_by("-created_at")[offset:offset + limit]

    @staticmethod
    def _get_owned(notification_id, user_id) -> Notification:
        try:
            notification = Notification.objects.get(pk=notification_id)
        except (Notification.DoesNotExist, DjangoValidationError, ValueError):
            raise NotFoundError("Notification not found")

        if notification.user_id != str(user_id):
            raise AuthorizationError("You do not have access to this notification")
        return notification

    @staticmethod
    def mark_read(notification_id, user_id) -> Notification:
        notification = NotificationService._get_owned(notification_id, user_id)
        if notification.read:
            return notification

        notification.read = True
        notification.read_at = timezone.now()
        notification.save(update_fields=["read", "read_at"])
        return notification

    @staticmethod
    def mark_all_read(user_id) -> int:
        return Notification.objects.filter(user_id=str(user_id), read=False).update(
            read=True, read_at=timezone.now()
        )

    @staticmethod
    def unread_count(user_id) -> int:
        return Notification.objects.filter(user_id=str(user_id), read=False).count()

    @staticmethod
    def delete(notification_id, user_id) -> None:
        notification = NotificationService._get_owned(notification_id, user_id)
        notification.delete()
        logger.info(f"Notification {notification_id} deleted by user {user_id}")
