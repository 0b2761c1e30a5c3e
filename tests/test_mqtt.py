from datetime import datetime, timezone
from unittest import mock

from appimagehelpers.mqtt import MQTT_NAMESPACE, PubSubData, mqtt_topic, publish_mqtt_message


def test_topic_escapes_update_information():
    ui = "gh-releases-zsync|AppImage|AppImageKit|continuous|appimagetool-x86_64.AppImage.zsync"
    assert mqtt_topic(ui) == (
        "p9q358t/gh-releases-zsync%7CAppImage%7CAppImageKit%7Ccontinuous%7Cappimagetool-x86_64.AppImage.zsync/version"
    )


def test_topic_escapes_wildcard():
    ui = "gh-releases-zsync|probonopd|merkaartor|continuous|Merkaartor*-x86_64.AppImage.zsync"
    assert mqtt_topic(ui) == (
        "p9q358t/gh-releases-zsync%7Cprobonopd%7Cmerkaartor%7Ccontinuous%7CMerkaartor%2A-x86_64.AppImage.zsync/version"
    )


def test_topic_structure():
    topic = mqtt_topic("zsync|https://example.com/a.zsync")
    assert topic.startswith(MQTT_NAMESPACE + "/")
    assert topic.endswith("/version")
    assert topic.count("/") == 2


def test_topic_empty():
    assert mqtt_topic("") is None


def test_pubsubdata_json_round_trip():
    data = PubSubData("App", "1.2.3", datetime(2020, 1, 2, 3, 4, 5, tzinfo=timezone.utc))
    assert PubSubData.from_json(data.to_json()) == data


def test_publish_empty_does_not_publish():
    assert mqtt_topic("") is None
    with mock.patch("paho.mqtt.client.Client") as client_cls:
        publish_mqtt_message("", "1.0")
    assert client_cls.return_value.publish.call_count == 0


def test_publish_non_empty_publishes_to_escaped_topic():
    ui = "zsync|https://example.com/a.zsync"
    expected_topic = "p9q358t/zsync%7Chttps%3A%2F%2Fexample.com%2Fa.zsync/version"
    assert mqtt_topic(ui) == expected_topic
    with mock.patch("paho.mqtt.client.Client") as client_cls:
        publish_mqtt_message(ui, "1.0")
    assert client_cls.call_count == 1
    client = client_cls.return_value
    assert client.publish.call_count == 1
    assert client.publish.call_args.args[0] == expected_topic


def test_publish_sends_retained_qos2():
    ui = "zsync|https://example.com/a.zsync"
    with mock.patch("paho.mqtt.client.Client") as client_cls:
        publish_mqtt_message(ui, "1.0")
    client = client_cls.return_value
    client.connect.assert_called_once_with("broker.hivemq.com", 1883)
    client.publish.assert_called_once_with(mqtt_topic(ui), "1.0", qos=2, retain=True)
    assert client.disconnect.call_count == 1