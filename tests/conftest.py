"""Shared park fixtures for the linking tests."""

import pytest


@pytest.fixture()
def nps_parks():
    """Three parks from the authoritative catalog."""
    return [
        {
            "id": "1",
            "park_code": "yell",
            "full_name": "Yellowstone National Park",
            "states": "WY,MT,ID",
            "latitude": 44.428,
            "longitude": -110.5885,
        },
        {
            "id": "2",
            "park_code": "yose",
            "full_name": "Yosemite National Park",
            "states": "CA",
            "latitude": 37.84883288,
            "longitude": -119.5571873,
        },
        {
            "id": "3",
            "park_code": "grca",
            "full_name": "Grand Canyon National Park",
            "states": "AZ",
            "latitude": 36.0544,
            "longitude": -112.1401,
        },
    ]


@pytest.fixture()
def wikidata_parks():
    """The same three parks as listed in Wikidata."""
    return [
        {
            "id": "w1",
            "wikidata_id": "Q180402",
            "label": "Yellowstone National Park",
            "state": "Wyoming",
            "latitude": 44.428,
            "longitude": -110.5885,
        },
        {
            "id": "w2",
            "wikidata_id": "Q180544",
            "label": "Yosemite National Park",
            "state": "California",
            "latitude": 37.84883288,
            "longitude": -119.5571873,
        },
        {
            "id": "w3",
            "wikidata_id": "Q223969",
            "label": "Grand Canyon National Park",
            "state": "Arizona",
            "latitude": 36.0544,
            "longitude": -112.1401,
        },
    ]
