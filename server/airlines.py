# airlines.py
# ---------------------------------------------------------------------
# Airline reference data, loaded from data/airlines.json on first use
# and held for the lifetime of the process.

import json
import logging
from pathlib import Path
from typing import List, Optional, Tuple, Union

from pydantic import ValidationError

from logging_utils import log_event
from models import Airline, AirlineLogo

logger = logging.getLogger("tripzip.airlines")


class AirlineStore:
    """
    Read-only lookup over the airline file.

    Lookups are case-insensitive. A file that is missing or unreadable
    yields an empty store; callers then simply see no matches.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self._path = Path(path)
        self._airlines: Optional[Tuple[Airline, ...]] = None

    @property
    def loaded(self) -> bool:
        return self._airlines is not None

    def _load(self) -> Tuple[Airline, ...]:
        if self._airlines is not None:
            return self._airlines

        try:
            with open(self._path, "r", encoding="utf-8") as f:
                raw = json.load(f)
            entries = raw.get("airlines") if isinstance(raw, dict) else None
            if not isinstance(entries, list):
                raise ValueError("expected an object with an \"airlines\" list")
        except (OSError, ValueError) as e:
            log_event(
                logger,
                "airlines_load_failed",
                level=logging.ERROR,
                path=str(self._path),
                error=str(e),
            )
            self._airlines = ()
            return self._airlines

        airlines: List[Airline] = []
        for entry in entries:
            try:
                airlines.append(Airline.model_validate(entry))
            except ValidationError as e:
                log_event(
                    logger,
                    "airline_record_skipped",
                    level=logging.WARNING,
                    record=entry,
                    error=str(e),
                )

        self._airlines = tuple(airlines)
        log_event(logger, "airlines_loaded", count=len(self._airlines), path=str(self._path))
        return self._airlines

    def all(self) -> List[Airline]:
        return list(self._load())

    def find_by_code(self, code: str) -> Optional[Airline]:
        code = (code or "").lower()
        if not code:
            return None
        for airline in self._load():
            if airline.iata.lower() == code:
                return airline
        return None

    def find_by_name(self, name: str) -> Optional[Airline]:
        name = (name or "").lower()
        if not name:
            return None
        for airline in self._load():
            if airline.name.lower() == name:
                return airline
        return None

    def resolve_logo(self, identifier: str) -> Optional[AirlineLogo]:
        """IATA code first, then exact (case-insensitive) name."""
        airline = self.find_by_code(identifier) or self.find_by_name(identifier)
        if airline is None:
            return None
        return AirlineLogo(
            logo=airline.logo,
            logo_cdn=airline.logo_cdn,
            iata=airline.iata,
            name=airline.name,
        )
