"""
Tests for the RabbitMQ notification publisher.
"""

import json

import pytest
from unittest.mock import MagicMock

from verification.rabbitmq import publisher
from verification.rabbitmq.publisher import RabbitMQPublisher


@pytest.fixture
def mock_pika(mocker):
    pika = mocker.patch("verification.rabbitmq.publisher.pika")
    channel = MagicMock()
    pika.BlockingConnection.return_value.channel.return_value = channel
    pika.BlockingConnection.return_value.is_closed = False
    return pika, channel


class TestRabbitMQPublisher:
    def test_declares_notification_queue(self, mock_pika, settings):
        settings.RABBITMQ_NOTIFICATION_QUEUE = "notification.created"
        _, channel = mock_pika

        RabbitMQPublisher()

        channel.queue_declare.assert_called_once_with(queue="notification.created", durable=True)

    def test_publish_sends_persistent_json(self, mock_pika):
        pika, channel = mock_pika
        payload = {"notificationId": 1, "recipientAccountId": 2, "message": "Halo"}

        assert RabbitMQPublisher().publish_notification(payload) is True

        kwargs = channel.basic_publish.call_args.kwargs
        assert kwargs["routing_key"] == "notification.created"
        assert json.loads(kwargs["body"]) == payload
        properties = pika.BasicProperties.call_args.kwargs
        assert properties["delivery_mode"] == 2
        assert properties["message_id"] == "notification-1"

    def test_unreachable_broker_returns_false(self, mock_pika):
        pika, _ = mock_pika
        pika.BlockingConnection.side_effect = Exception("Connection refused")

        instance = RabbitMQPublisher()

        assert instance.channel is None
        assert instance.publish_notification({"notificationId": 1}) is False

    def test_publish_error_closes_connection(self, mock_pika):
        _, channel = mock_pika
        channel.basic_publish.side_effect = Exception("channel closed")
        instance = RabbitMQPublisher()

        assert instance.publish_notification({"notificationId": 1}) is False
        assert instance.channel is None
        assert instance.connection is None


class TestModuleLevelPublish:
    def test_reuses_global_publisher(self, mocker, monkeypatch):
        monkeypatch.setattr(publisher, "_publisher", None)
        factory = mocker.patch("verification.rabbitmq.publisher.RabbitMQPublisher")
        factory.return_value.publish_notification.return_value = True

        assert publisher.get_publisher() is publisher.get_publisher()
        factory.assert_called_once()
