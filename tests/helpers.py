# Shared request/response fixtures for the provider and resolver tests.

OSRM_HOST = "osrm.test"
GRAPHHOPPER_HOST = "graphhopper.test"
MAPBOX_HOST = "mapbox.test"

# Ujjain: Mahakal temple area -> Ram Ghat
ORIGIN = (23.1828, 75.7689)
DESTINATION = (23.1769, 75.7889)
PATH = [ORIGIN, (23.1800, 75.7750), (23.1785, 75.7820), DESTINATION]


def lnglat(points):
    """[(lat, lng), ...] -> GeoJSON [[lng, lat], ...]"""
    return [[lng, lat] for lat, lng in points]


def osrm_body(points=PATH, distance=2350.4, duration=1710.2):
    return {
        "code": "Ok",
        "routes": [
            {
                "geometry": {"type": "LineString", "coordinates": lnglat(points)},
                "distance": distance,
                "duration": duration,
            }
        ],
        "waypoints": [],
    }


def graphhopper_body(points=PATH, distance=2290.0, time_ms=1650400):
    return {
        "paths": [
            {
                "points": {"type": "LineString", "coordinates": lnglat(points)},
                "distance": distance,
                "time": time_ms,
            }
        ]
    }


def mapbox_body(points=PATH, distance=2310.7, duration=1690.0):
    return {
        "code": "Ok",
        "routes": [
            {
                "geometry": {"type": "LineString", "coordinates": lnglat(points)},
                "distance": distance,
                "duration": duration,
            }
        ],
    }

