#Purpose: The OSRM "adapter/client" (keyless provider).
#Sole responsibility: talk to an OSRM-compatible /route endpoint and return a RouteResult.
#Encapsulates OSRM-specific details:
#coordinate formatting (lng,lat in the URL path)
#URL construction (/route/v1/{profile}/...)
#the "code" field OSRM puts in every body
#It needs no credential, which is why the resolver always keeps it as the last fallback.

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


class OSRMClient(RouteProvider):
    """
    OSRM Adapter / Client

    GET {base_url}/route/v1/{profile}/{lng},{lat};{lng},{lat}?overview=full&geometries=geojson
    """

    name = ProviderName.OSRM
    requires_credential = False

    def build_request(self, origin: LatLng, destination: LatLng) -> httpx.Request:
        coordinates = format_lnglat_path([origin, destination])
        url = f"{self.base_url}/route/v1/{self.profile}/{coordinates}"
        return self.client.build_request(
            "GET",
            url,
            params={
                "overview": "full",  # full geometry, not the simplified one
                "geometries": "geojson",
            },
        )

    def parse_payload(self, data: dict) -> RouteResult:
        code = data.get("code")
        if code == "NoRoute":
            raise NoPathError("OSRM found no route")
        if code != "Ok":
            raise ProviderError(f"OSRM error: {data.get('message', code or 'Unknown error')}")

        route = first_item(data, "routes")  #take the first route (OSRM may return alternatives)
        coordinates = parse_lnglat_line(route["geometry"]["coordinates"])

        return RouteResult.new(
            coordinates=coordinates,
            provider=self.name,
            distance_m=optional_number(route.get("distance")),
            duration_s=optional_number(route.get("duration")),
        )
