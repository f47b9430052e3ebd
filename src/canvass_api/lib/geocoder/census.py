"""US Census Bureau geocoder provider.

Uses the Census Geocoding API (https://geocoding.geo.census.gov/geocoder/)
to verify a street address against the Census TIGER/Line address ranges.
The matched address comes back as ``"5 AVENUE A, NEW YORK, NY, 10009"``.
"""

from loguru import logger

from canvass_api.lib.geocoder.base import BaseGeocoder, GeocodingProviderError, VerifiedAddress

CENSUS_API_URL = "https://geocoding.geo.census.gov/geocoder/locations/onelineaddress"
DEFAULT_TIMEOUT = 30.0


class CensusGeocoder(BaseGeocoder):
    """US Census Bureau address verification provider."""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT) -> None:
        super().__init__(timeout)

    @property
    def provider_name(self) -> str:
        return "census"

    @property
    def supports_verify(self) -> bool:
        return True

    async def forward_verify(self, street_address: str) -> VerifiedAddress | None:
        """Verify an address using the Census Bureau API.

        Args:
            street_address: Freeform one-line address.

        Returns:
            VerifiedAddress or None if the provider responded but found no match.

        Raises:
            GeocodingProviderError: On transport or service errors.
        """
        params = {
            "address": street_address,
            "benchmark": "Public_AR_Current",
            "format": "json",
        }
        data = await self._get_json(CENSUS_API_URL, params)
        return self._parse_response(data)

    def _parse_response(self, data: dict) -> VerifiedAddress | None:
        """Parse a Census API response into a VerifiedAddress."""
        matches = data.get("result", {}).get("addressMatches", [])
        if not matches:
            return None

        matched = matches[0].get("matchedAddress")
        if not matched:
            return None

        parts = [part.strip() for part in matched.split(",")]
        if len(parts) != 4:
            logger.warning(f"Unexpected Census matchedAddress shape ({len(parts)} parts)")
            raise GeocodingProviderError("census", "Failed to parse matched address")

        street, city, state, zipcode = parts
        return VerifiedAddress(
            street_1=street.upper(),
            street_2="",
            city=city.upper(),
            state=state.upper(),
            zip=zipcode,
            raw_response=data,
        )
