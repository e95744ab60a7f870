#Purpose: GraphHopper Routing API adapter (needs an API key).
#POST with a JSON list of [lng, lat] points, profile + key in the query string.
#GraphHopper reports time in milliseconds; we normalize to seconds.

import httpx

from routing.coordinates import LatLng
from routing.models import ProviderName, RouteResult
from routing.provider_base import RouteProvider, first_item, optional_number, parse_lnglat_line


class GraphHopperClient(RouteProvider):
    """POST {base_url}/api/1/route?profile=...&points_encoded=false&key=..."""

    name = ProviderName.GRAPHHOPPER
    requires_credential = True

    def build_request(self, origin: LatLng, destination: LatLng) -> httpx.Request:
        params = {
            "profile": self.profile,
            "points_encoded": "false",  # plain GeoJSON coordinates instead of an encoded polyline
            "instructions": "false",
            "locale": "en",
            "key": self.credential,
        }
        body = {
            "points": [
                [origin.lng, origin.lat],
                [destination.lng, destination.lat],
            ],
        }
        return self.client.build_request(
            "POST", f"{self.base_url}/api/1/route", params=params, json=body
        )

    def parse_payload(self, data: dict) -> RouteResult:
        path = first_item(data, "paths")
        coordinates = parse_lnglat_line(path["points"]["coordinates"])

        time_ms = optional_number(path.get("time"))
        return RouteResult.new(
            coordinates=coordinates,
            provider=self.name,
            distance_m=optional_number(path.get("distance")),
            duration_s=round(time_ms / 1000) if time_ms is not None else None,
        )
