#Purpose: Mapbox Directions API adapter (needs an access token).

import httpx

from routing.coordinates import LatLng
from routing.errors import NoPathError, ProviderError
from routing.models import ProviderName, RouteResult
from routing.provider_base import (
    RouteProvider,
    first_item,
    format_lnglat_path,
    optional_number,
    parse_lnglat_line,
)


class MapboxClient(RouteProvider):
    """GET {base_url}/directions/v5/mapbox/{profile}/{lng},{lat};{lng},{lat}?access_token=..."""

    name = ProviderName.MAPBOX
    requires_credential = True

    def build_request(self, origin: LatLng, destination: LatLng) -> httpx.Request:
        coordinates = format_lnglat_path([origin, destination])
        url = f"{self.base_url}/directions/v5/mapbox/{self.profile}/{coordinates}"
        return self.client.build_request(
            "GET",
            url,
            params={
                "overview": "full",
                "geometries": "geojson",
                "access_token": self.credential,
            },
        )

    def parse_payload(self, data: dict) -> RouteResult:
        code = data.get("code", "Ok")
        if code in ("NoRoute", "NoSegment"):
            raise NoPathError(f"Mapbox: {code}")
        if code != "Ok":
            raise ProviderError(f"Mapbox error: {data.get('message', code)}")

        route = first_item(data, "routes")
        coordinates = parse_lnglat_line(route["geometry"]["coordinates"])

        return RouteResult.new(
            coordinates=coordinates,
            provider=self.name,
            distance_m=optional_number(route.get("distance")),
            duration_s=optional_number(route.get("duration")),
        )
