"""Subway arrival aggregation across GTFS-RT feeds."""

from subway_api.services.arrivals.aggregator import ArrivalAggregator
from subway_api.services.arrivals.filtering import Arrival, extract_arrivals, sort_arrivals

__all__ = [
    "Arrival",
    "ArrivalAggregator",
    "extract_arrivals",
    "sort_arrivals",
]
