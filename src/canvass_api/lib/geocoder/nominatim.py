"""OpenStreetMap Nominatim geocoder provider.

Reverse geocoding uses ``/reverse`` and address verification uses
``/search`` with ``addressdetails=1``. Free but rate-limited to 1 req/sec,
and requests must identify the application via User-Agent.
"""

from loguru import logger

from canvass_api.lib.geocoder.base import (
    BaseGeocoder,
    GeocodingProviderError,
    ReverseGeocodeResult,
    VerifiedAddress,
)

NOMINATIM_BASE_URL = "https://nominatim.openstreetmap.org"
DEFAULT_TIMEOUT = 10.0
DEFAULT_USER_AGENT = "canvass-api/1.0"

# Nominatim reports the locality under whichever key matches its admin level
_CITY_KEYS = ("city", "town", "village", "hamlet", "suburb")


class NominatimGeocoder(BaseGeocoder):
    """OpenStreetMap Nominatim geocoder provider."""

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        email: str = "",
        user_agent: str = DEFAULT_USER_AGENT,
        base_url: str = NOMINATIM_BASE_URL,
    ) -> None:
        super().__init__(timeout)
        self._email = email
        self._user_agent = user_agent
        self._base_url = base_url.rstrip("/")

    @property
    def provider_name(self) -> str:
        return "nominatim"

    @property
    def supports_reverse(self) -> bool:
        return True

    @property
    def supports_verify(self) -> bool:
        return True

    def _params(self, **params: str | int | float) -> dict[str, str | int | float]:
        if self._email:
            params["email"] = self._email
        return params

    async def reverse_geocode(self, latitude: float, longitude: float) -> ReverseGeocodeResult | None:
        """Reverse geocode coordinates using the Nominatim API."""
        data = await self._get_json(
            f"{self._base_url}/reverse",
            self._params(lat=latitude, lon=longitude, format="jsonv2", addressdetails=1),
            headers={"User-Agent": self._user_agent},
        )
        return self._parse_reverse(data)

    async def forward_verify(self, street_address: str) -> VerifiedAddress | None:
        """Verify a street address using the Nominatim search API."""
        data = await self._get_json(
            f"{self._base_url}/search",
            self._params(q=street_address, format="json", limit=1, addressdetails=1, countrycodes="us"),
            headers={"User-Agent": self._user_agent},
        )
        if not data:
            return None
        return self._parse_verify(data[0])

    def _parse_reverse(self, data: dict) -> ReverseGeocodeResult | None:
        """Parse a ``/reverse`` response; ``{"error": ...}`` means no match."""
        if not data or "error" in data:
            return None
        try:
            lat = float(data["lat"])
            lon = float(data["lon"])
        except (KeyError, ValueError, TypeError) as e:
            logger.warning(f"Failed to parse Nominatim reverse response: {e}")
            raise GeocodingProviderError("nominatim", f"Failed to parse response: {e}") from e

        return ReverseGeocodeResult(
            latitude=lat,
            longitude=lon,
            matched_address=data.get("display_name"),
            raw_response=data,
        )

    def _parse_verify(self, best: dict) -> VerifiedAddress | None:
        """Build postal fields from a search hit's ``address`` details."""
        details = best.get("address") or {}
        road = details.get("road")
        if not road:
            return None

        street = " ".join(part for part in (details.get("house_number"), road) if part)
        city = next((details[key] for key in _CITY_KEYS if details.get(key)), None)

        # "ISO3166-2-lvl4": "US-NY" carries the two-letter state code
        iso_state = details.get("ISO3166-2-lvl4", "")
        state = iso_state.split("-", 1)[1] if iso_state.startswith("US-") else details.get("state")

        return VerifiedAddress(
            street_1=street.upper(),
            street_2="",
            city=city.upper() if city else None,
            state=state.upper() if state else None,
            zip=details.get("postcode"),
            raw_response=best,
        )
