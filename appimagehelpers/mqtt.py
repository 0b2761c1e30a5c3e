"""Publishing AppImage versions over MQTT."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from urllib.parse import quote_plus, urlsplit

import paho.mqtt.client as mqtt

MQTT_SERVER_URI = "http://broker.hivemq.com:1883"
MQTT_NAMESPACE = "p9q358t"  # Every topic begins with this namespace.

_DEFAULT_PORT = 1883
_PUBLISH_TIMEOUT = 30.0


@dataclass
class PubSubData:
    """Data exchanged between an AppImage authoring tool and desktop integration."""

    name: str
    version: str
    fstime: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_json(self) -> str:
        """Serialise with the keys ``Name``, ``Version`` and ``FSTime``."""
        return json.dumps({"Name": self.name, "Version": self.version, "FSTime": self.fstime.isoformat()})

    @classmethod
    def from_json(cls, text: str) -> "PubSubData":
        """Parse the form written by :meth:`to_json`."""
        data = json.loads(text)
        return cls(data["Name"], data["Version"], datetime.fromisoformat(data["FSTime"]))


def mqtt_topic(updateinformation: str) -> str | None:
    """Return the version topic for ``updateinformation``, or None if it is empty."""
    escaped = quote_plus(updateinformation, safe="")
    if not escaped:
        return None
    return f"{MQTT_NAMESPACE}/{escaped}/version"


def _new_client(client_id: str) -> mqtt.Client:
    api_version = getattr(mqtt, "CallbackAPIVersion", None)
    if api_version is not None:
        return mqtt.Client(api_version.VERSION2, client_id=client_id)
    return mqtt.Client(client_id=client_id)


def publish_mqtt_message(updateinformation: str, version: str) -> None:
    """Publish ``version`` as a retained QoS 2 message for ``updateinformation``."""
    topic = mqtt_topic(updateinformation)
    if topic is None:
        return
    uri = urlsplit(MQTT_SERVER_URI)
    client = _new_client("pub")
    if uri.username:
        client.username_pw_set(uri.username, uri.password)
    client.connect(uri.hostname or "localhost", uri.port or _DEFAULT_PORT)
    client.loop_start()
    try:
        print("Publishing version", version, "for", updateinformation)
        info = client.publish(topic, version, qos=2, retain=True)
        info.wait_for_publish(timeout=_PUBLISH_TIMEOUT)
    finally:
        client.loop_stop()
        client.disconnect()