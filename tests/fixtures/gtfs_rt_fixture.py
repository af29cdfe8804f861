"""Test fixtures for GTFS-RT protobuf data."""

from __future__ import annotations

import time

from google.transit import gtfs_realtime_pb2


def build_trip_update_feed(
    route_id: str | None = "6",
    stop_updates: list[dict] | None = None,
    trip_id: str = "trip_001",
    feed_timestamp: int | None = None,
) -> bytes:
    """Build a serialized FeedMessage with a single TripUpdate entity.

    Args:
        route_id: Trip route, or None to leave it unset.
        stop_updates: List of dicts with keys: stop_id, arrival_time,
            departure_time, stop_sequence. Missing times are left unset.
        trip_id: The trip identifier.
        feed_timestamp: Unix timestamp for the feed header.

    Returns:
        Serialized protobuf bytes.
    """
    return build_feed(
        [{"trip_id": trip_id, "route_id": route_id, "stop_updates": stop_updates or []}],
        feed_timestamp=feed_timestamp,
    )


def build_feed(trips: list[dict], feed_timestamp: int | None = None) -> bytes:
    """Build a FeedMessage with one TripUpdate entity per trip dict."""
    feed = gtfs_realtime_pb2.FeedMessage()
    feed.header.gtfs_realtime_version = "1.0"
    feed.header.timestamp = feed_timestamp or int(time.time())

    for i, trip in enumerate(trips):
        entity = feed.entity.add()
        entity.id = f"{i:06d}"
        tu = entity.trip_update
        tu.trip.trip_id = trip.get("trip_id", f"trip_{i:03d}")
        if trip.get("route_id") is not None:
            tu.trip.route_id = trip["route_id"]

        for su in trip.get("stop_updates", []):
            stu = tu.stop_time_update.add()
            stu.stop_id = su["stop_id"]
            if "stop_sequence" in su:
                stu.stop_sequence = su["stop_sequence"]
            if su.get("arrival_time") is not None:
                stu.arrival.time = su["arrival_time"]
            if su.get("departure_time") is not None:
                stu.departure.time = su["departure_time"]

    return feed.SerializeToString()


def build_mixed_feed(now: int) -> bytes:
    """Build a feed mixing vehicle, alert and trip update entities."""
    feed = gtfs_realtime_pb2.FeedMessage()
    feed.header.gtfs_realtime_version = "1.0"
    feed.header.timestamp = now

    vehicle_entity = feed.entity.add()
    vehicle_entity.id = "vp_1"
    vp = vehicle_entity.vehicle
    vp.trip.trip_id = "trip_vp"
    vp.trip.route_id = "A"
    vp.position.latitude = 40.7527
    vp.position.longitude = -73.9772
    vp.current_stop_sequence = 3
    vp.timestamp = now

    alert_entity = feed.entity.add()
    alert_entity.id = "alert_1"
    alert = alert_entity.alert
    alert.cause = 3
    alert.effect = 3
    text = alert.header_text.translation.add()
    text.text = "Delays on the 6"
    text.language = "en"

    tu_entity = feed.entity.add()
    tu_entity.id = "tu_1"
    tu = tu_entity.trip_update
    tu.trip.trip_id = "trip_tu"
    tu.trip.route_id = "6"
    tu.trip.start_date = "20240101"
    tu.timestamp = now
    tu.delay = -30
    stu = tu.stop_time_update.add()
    stu.stop_sequence = 1
    stu.stop_id = "635N"
    stu.arrival.delay = -15
    stu.arrival.time = now + 300
    stu.arrival.uncertainty = 30
    stu.departure.time = now + 330

    return feed.SerializeToString()


def build_empty_feed(feed_timestamp: int | None = None) -> bytes:
    """Build an empty FeedMessage with no entities."""
    feed = gtfs_realtime_pb2.FeedMessage()
    feed.header.gtfs_realtime_version = "1.0"
    feed.header.timestamp = feed_timestamp or int(time.time())
    return feed.SerializeToString()


# ---------------------------------------------------------------------------
# Raw wire-format builders for malformed / extension payloads
# ---------------------------------------------------------------------------


def encode_varint(value: int) -> bytes:
    """Encode a non-negative integer as a base-128 varint."""
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def encode_tag(field_number: int, wire_type: int) -> bytes:
    return encode_varint((field_number << 3) | wire_type)


def varint_field(field_number: int, value: int) -> bytes:
    return encode_tag(field_number, 0) + encode_varint(value)


def bytes_field(field_number: int, payload: bytes | str) -> bytes:
    if isinstance(payload, str):
        payload = payload.encode("utf-8")
    return encode_tag(field_number, 2) + encode_varint(len(payload)) + payload


def fixed64_field(field_number: int, payload: bytes = b"\x00" * 8) -> bytes:
    return encode_tag(field_number, 1) + payload


def fixed32_field(field_number: int, payload: bytes = b"\x00" * 4) -> bytes:
    return encode_tag(field_number, 5) + payload


def raw_stop_time_update(
    stop_id: str,
    arrival_time: int | None = None,
    departure_time: int | None = None,
    extra: bytes = b"",
) -> bytes:
    """Encode a StopTimeUpdate message body."""
    body = b""
    if arrival_time is not None:
        body += bytes_field(2, varint_field(2, arrival_time))
    if departure_time is not None:
        body += bytes_field(3, varint_field(2, departure_time))
    body += bytes_field(4, stop_id)
    return body + extra


def raw_trip_update(
    route_id: str, stop_time_updates: list[bytes], trip_extra: bytes = b""
) -> bytes:
    """Encode a TripUpdate message body from encoded StopTimeUpdate bodies."""
    descriptor = bytes_field(1, "trip_raw") + bytes_field(5, route_id) + trip_extra
    body = bytes_field(1, descriptor)
    for stu in stop_time_updates:
        body += bytes_field(2, stu)
    return body


def raw_feed(trip_update_bodies: list[bytes]) -> bytes:
    """Encode a FeedMessage with one entity per TripUpdate body."""
    header = bytes_field(1, "1.0") + varint_field(3, 1700000000)
    out = bytes_field(1, header)
    for i, body in enumerate(trip_update_bodies):
        out += bytes_field(2, bytes_field(1, f"e{i}") + bytes_field(3, body))
    return out
