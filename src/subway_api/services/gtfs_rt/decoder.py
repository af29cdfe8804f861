"""GTFS-RT decode layer.

Walks a serialized ``FeedMessage`` down to stop-time events, keeping only the
fields needed to build arrivals. Everything else is skipped on the wire.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from subway_api.logging import get_logger
from subway_api.services.gtfs_rt.wire import (
    UnsupportedWireTypeError,
    WireType,
    read_length_delimited,
    read_string,
    read_tag,
    read_varint,
    skip_field,
)

logger = get_logger(__name__)

# Field numbers from gtfs-realtime.proto
FEED_MESSAGE_ENTITY = 2
FEED_ENTITY_TRIP_UPDATE = 3
TRIP_UPDATE_TRIP = 1
TRIP_UPDATE_STOP_TIME_UPDATE = 2
TRIP_DESCRIPTOR_ROUTE_ID = 5
STOP_TIME_UPDATE_ARRIVAL = 2
STOP_TIME_UPDATE_DEPARTURE = 3
STOP_TIME_UPDATE_STOP_ID = 4
STOP_TIME_EVENT_TIME = 2


@dataclass
class StopTimeUpdate:
    """Predicted times for one stop of a trip (epoch seconds)."""

    stop_id: str = ""
    arrival_time: int | None = None
    departure_time: int | None = None

    @property
    def effective_time(self) -> int | None:
        """Arrival time, falling back to departure time."""
        return self.arrival_time or self.departure_time


@dataclass
class TripUpdate:
    """Route and ordered stop-time updates of one trip."""

    route_id: str = ""
    stop_time_updates: list[StopTimeUpdate] = field(default_factory=list)


def _skip_unknown(data: bytes, pos: int, end: int, wire_type: int) -> int | None:
    """Skip an unrecognized field, or return None if the level must stop here."""
    try:
        return skip_field(data, pos, end, wire_type)
    except UnsupportedWireTypeError as exc:
        logger.debug("Stopping message level", wire_type=exc.wire_type, offset=pos)
        return None


def _decode_stop_time_event(data: bytes, pos: int, end: int) -> int | None:
    time: int | None = None
    while pos < end:
        field_number, wire_type, pos = read_tag(data, pos, end)
        if field_number == STOP_TIME_EVENT_TIME:
            if wire_type != WireType.VARINT:
                break
            time, pos = read_varint(data, pos, end)
        else:
            next_pos = _skip_unknown(data, pos, end, wire_type)
            if next_pos is None:
                break
            pos = next_pos
    # An unset time is encoded as 0 by some producers
    return time or None


def _decode_stop_time_update(data: bytes, pos: int, end: int) -> StopTimeUpdate:
    update = StopTimeUpdate()
    while pos < end:
        field_number, wire_type, pos = read_tag(data, pos, end)
        if field_number in (STOP_TIME_UPDATE_ARRIVAL, STOP_TIME_UPDATE_DEPARTURE):
            if wire_type != WireType.LENGTH_DELIMITED:
                break
            start, pos = read_length_delimited(data, pos, end)
            time = _decode_stop_time_event(data, start, pos)
            if field_number == STOP_TIME_UPDATE_ARRIVAL:
                update.arrival_time = time
            else:
                update.departure_time = time
        elif field_number == STOP_TIME_UPDATE_STOP_ID:
            if wire_type != WireType.LENGTH_DELIMITED:
                break
            update.stop_id, pos = read_string(data, pos, end)
        else:
            next_pos = _skip_unknown(data, pos, end, wire_type)
            if next_pos is None:
                break
            pos = next_pos
    return update


def _decode_trip_descriptor(data: bytes, pos: int, end: int) -> str:
    """Return the descriptor's route id, or an empty string."""
    route_id = ""
    while pos < end:
        field_number, wire_type, pos = read_tag(data, pos, end)
        if field_number == TRIP_DESCRIPTOR_ROUTE_ID:
            if wire_type != WireType.LENGTH_DELIMITED:
                break
            route_id, pos = read_string(data, pos, end)
        else:
            next_pos = _skip_unknown(data, pos, end, wire_type)
            if next_pos is None:
                break
            pos = next_pos
    return route_id


def _decode_trip_update(data: bytes, pos: int, end: int) -> TripUpdate:
    trip_update = TripUpdate()
    while pos < end:
        field_number, wire_type, pos = read_tag(data, pos, end)
        if field_number == TRIP_UPDATE_TRIP:
            if wire_type != WireType.LENGTH_DELIMITED:
                break
            start, pos = read_length_delimited(data, pos, end)
            trip_update.route_id = _decode_trip_descriptor(data, start, pos)
        elif field_number == TRIP_UPDATE_STOP_TIME_UPDATE:
            if wire_type != WireType.LENGTH_DELIMITED:
                break
            start, pos = read_length_delimited(data, pos, end)
            trip_update.stop_time_updates.append(_decode_stop_time_update(data, start, pos))
        else:
            next_pos = _skip_unknown(data, pos, end, wire_type)
            if next_pos is None:
                break
            pos = next_pos
    return trip_update


def _decode_entity(data: bytes, pos: int, end: int) -> TripUpdate | None:
    trip_update: TripUpdate | None = None
    while pos < end:
        field_number, wire_type, pos = read_tag(data, pos, end)
        if field_number == FEED_ENTITY_TRIP_UPDATE:
            if wire_type != WireType.LENGTH_DELIMITED:
                break
            start, pos = read_length_delimited(data, pos, end)
            trip_update = _decode_trip_update(data, start, pos)
        else:
            next_pos = _skip_unknown(data, pos, end, wire_type)
            if next_pos is None:
                break
            pos = next_pos
    return trip_update


def decode_trip_updates(data: bytes) -> list[TripUpdate]:
    """Decode the trip updates carried by a serialized FeedMessage.

    Unknown fields are skipped. A recognized field with an unexpected wire
    type ends its own message level only; decoding resumes in the parent at
    the end of that message.

    Raises:
        WireFormatError: If a length prefix or fixed-width field runs past
            the end of its enclosing message.
    """
    trip_updates: list[TripUpdate] = []
    pos, end = 0, len(data)
    while pos < end:
        field_number, wire_type, pos = read_tag(data, pos, end)
        if field_number == FEED_MESSAGE_ENTITY:
            if wire_type != WireType.LENGTH_DELIMITED:
                break
            start, pos = read_length_delimited(data, pos, end)
            trip_update = _decode_entity(data, start, pos)
            if trip_update is not None:
                trip_updates.append(trip_update)
        else:
            next_pos = _skip_unknown(data, pos, end, wire_type)
            if next_pos is None:
                break
            pos = next_pos
    return trip_updates


class GtfsRtDecoder:
    """Decodes raw GTFS-RT bytes into trip updates, isolating per-feed failures."""

    @staticmethod
    def decode(data: bytes, feed_id: str) -> list[TripUpdate]:
        """Decode one feed's payload.

        Args:
            data: Raw protobuf bytes.
            feed_id: Feed label for logging.

        Returns:
            Decoded trip updates, or an empty list if the payload is malformed.
        """
        try:
            trip_updates = decode_trip_updates(data)
        except Exception as exc:
            logger.error(
                "Failed to decode GTFS-RT feed",
                feed_id=feed_id,
                size_bytes=len(data),
                error=str(exc),
            )
            return []

        logger.info(
            "GTFS-RT feed decoded",
            feed_id=feed_id,
            size_bytes=len(data),
            trip_update_count=len(trip_updates),
        )
        return trip_updates
