import json

import pytest

from airlines import AirlineStore
from storage import MemoryStore

AIRLINES = [
    {
        "iata": "AA",
        "name": "American Airlines",
        "logo": "/images/airlines/AA.png",
        "logo_cdn": "https://images.kiwi.com/airlines/64/AA.png",
    },
    {
        "iata": "DL",
        "name": "Delta",
        "logo": "/images/airlines/DL.png",
        "logo_cdn": "https://images.kiwi.com/airlines/64/DL.png",
    },
    {
        "iata": "BA",
        "name": "British Airways",
        "logo": "/images/airlines/BA.png",
        "logo_cdn": "https://images.kiwi.com/airlines/64/BA.png",
        "alliance": "oneworld",
    },
]


@pytest.fixture
def airlines_file(tmp_path):
    path = tmp_path / "airlines.json"
    path.write_text(json.dumps({"airlines": AIRLINES}), encoding="utf-8")
    return path


@pytest.fixture
def airline_store(airlines_file):
    return AirlineStore(airlines_file)


@pytest.fixture
def store():
    return MemoryStore()
