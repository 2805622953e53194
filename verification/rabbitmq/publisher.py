import json
import logging
import pika
from django.conf import settings

logger = logging.getLogger(__name__)


class RabbitMQPublisher:
    """RabbitMQ publisher for resident notifications."""

    def __init__(self):
        """Initialize RabbitMQ publisher with configuration from settings."""
        self.connection = None
        self.channel = None
        self._initialize_connection()

    def _initialize_connection(self):
        """Initialize the RabbitMQ connection and channel."""
        try:
            credentials = pika.PlainCredentials(settings.RABBITMQ_USER, settings.RABBITMQ_PASSWORD)
            parameters = pika.ConnectionParameters(
                host=settings.RABBITMQ_HOST,
                port=settings.RABBITMQ_PORT,
                virtual_host=settings.RABBITMQ_VHOST,
                credentials=credentials,
                heartbeat=600,
                blocked_connection_timeout=300,
            )
            self.connection = pika.BlockingConnection(parameters)
            self.channel = self.connection.channel()

            # Declare the queue to ensure it exists
            self.channel.queue_declare(queue=settings.RABBITMQ_NOTIFICATION_QUEUE, durable=True)

            logger.info("RabbitMQ publisher initialized successfully")
        except Exception as e:
            logger.error(f"Failed to initialize RabbitMQ publisher: {str(e)}")
            self.connection = None
            self.channel = None

    def publish_notification(self, payload: dict) -> bool:
        """
        Publish a notification.created event for the delivery workers
        (push, WhatsApp simulation, email).

        Args:
            payload: Notification id, recipient account id, category and message

        Returns:
            bool: True if successful, False otherwise
        """
        if not self.channel:
            logger.warning("RabbitMQ channel not initialized, attempting to reconnect")
            self._initialize_connection()
            if not self.channel:
                logger.error("Failed to reconnect to RabbitMQ")
                return False

        try:
            self.channel.basic_publish(
                exchange="",
                routing_key=settings.RABBITMQ_NOTIFICATION_QUEUE,
                body=json.dumps(payload),
                # Persistent; message_id lets delivery workers drop redeliveries
                properties=pika.BasicProperties(
                    delivery_mode=2,
                    content_type="application/json",
                    message_id=f"notification-{payload.get('notificationId')}",
                    type="notification.created",
                ),
            )

            logger.info(
                f"Published notification.created event {payload.get('notificationId')} "
                f"for account {payload.get('recipientAccountId')}"
            )
            return True

        except Exception as e:
            logger.error(f"Failed to publish notification.created event: {str(e)}")
            # Try to reconnect for next time
            self._close()
            return False

    def _close(self):
        """Close the RabbitMQ connection."""
        try:
            if self.connection and not self.connection.is_closed:
                self.connection.close()
                logger.info("RabbitMQ connection closed")
        except Exception as e:
            logger.error(f"Error closing RabbitMQ connection: {str(e)}")
        finally:
            self.connection = None
            self.channel = None

    def __del__(self):
        """Cleanup on object destruction."""
        self._close()


# Global publisher instance
_publisher = None


def get_publisher() -> RabbitMQPublisher:
    """Get or create the global publisher instance."""
    global _publisher
    if _publisher is None:
        _publisher = RabbitMQPublisher()
    return _publisher


def publish_notification(payload: dict) -> bool:
    """
    Publish a notification.created event to RabbitMQ.

    Args:
        payload: Dictionary containing:
            - notificationId: Stored notification id
            - recipientAccountId: Account the notification is addressed to
            - category: SYSTEM or DUES
            - message: Rendered message text
            - createdAt: ISO timestamp

    Returns:
        bool: True if successful, False otherwise
    """
    publisher = get_publisher()
    return publisher.publish_notification(payload)
