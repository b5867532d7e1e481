"""Reverse geocoding collaborators used for event enrichment."""

from linktrace.geocoding.client import NominatimGeocoder, ReverseGeocoder

__all__ = ["NominatimGeocoder", "ReverseGeocoder"]
