"""Photon (Komoot) geocoder provider.

Used as the second reverse-geocoding tier. Free, open-source, and
self-hostable; based on OpenStreetMap data.
"""

from loguru import logger

from canvass_api.lib.geocoder.base import BaseGeocoder, GeocodingProviderError, ReverseGeocodeResult

DEFAULT_BASE_URL = "https://photon.komoot.io"
DEFAULT_TIMEOUT = 10.0


class PhotonGeocoder(BaseGeocoder):
    """Photon (Komoot) reverse geocoder provider."""

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        base_url: str = DEFAULT_BASE_URL,
    ) -> None:
        super().__init__(timeout)
        self._base_url = base_url.rstrip("/")

    @property
    def provider_name(self) -> str:
        return "photon"

    @property
    def supports_reverse(self) -> bool:
        return True

    async def reverse_geocode(self, latitude: float, longitude: float) -> ReverseGeocodeResult | None:
        """Reverse geocode coordinates using the Photon API."""
        data = await self._get_json(
            f"{self._base_url}/reverse",
            {"lat": latitude, "lon": longitude, "limit": 1, "lang": "en"},
        )
        return self._parse_response(data)

    def _parse_response(self, data: dict) -> ReverseGeocodeResult | None:
        """Parse a Photon GeoJSON FeatureCollection."""
        features = data.get("features", [])
        if not features:
            return None

        best = features[0]
        try:
            coords = best["geometry"]["coordinates"]
            lng = float(coords[0])
            lat = float(coords[1])
        except (KeyError, IndexError, ValueError, TypeError) as e:
            logger.warning(f"Failed to parse Photon response: {e}")
            raise GeocodingProviderError("photon", f"Failed to parse response: {e}") from e

        props = best.get("properties", {})
        street = " ".join(part for part in (props.get("housenumber"), props.get("street")) if part)
        matched = ", ".join(part for part in (street, props.get("city"), props.get("state")) if part)

        return ReverseGeocodeResult(
            latitude=lat,
            longitude=lng,
            matched_address=matched or props.get("name"),
            raw_response=data,
        )
