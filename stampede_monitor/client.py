"""Stampede availability API client"""

import logging
from typing import Any, List

import requests

from .config import MonitorConfig

logger = logging.getLogger(__name__)


def setup_session() -> requests.Session:
    session = requests.Session()
    session.headers.update({
        'User-Agent': 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36',
        'Accept': 'application/json',
        'Accept-Language': 'en-GB,en;q=0.9',
    })
    return session


def extract_slot_list(data: Any) -> List[Any]:
    """Pull the slot array out of whichever response shape the API returned"""
    if isinstance(data, list):
        return data
    if not isinstance(data, dict):
        return []

    for key in ('times', 'slots'):
        if isinstance(data.get(key), list):
            return data[key]

    for value in data.values():
        if isinstance(value, list):
            return value
    return []


class AvailabilityClient:
    def __init__(self, config: MonitorConfig, session: requests.Session = None):
        self.config = config
        self.session = session or setup_session()

    def build_params(self, iso_date: str) -> dict:
        return {
            'org_id': self.config.org_id,
            'serial': self.config.serial,
            'date': iso_date,
            'party_size': str(self.config.party_size),
        }

    def times_for_date(self, iso_date: str) -> List[Any]:
        """Fetch raw slots for one date; any failure yields an empty list"""
        try:
            response = self.session.get(
                self.config.api_url,
                params=self.build_params(iso_date),
                timeout=self.config.request_timeout,
            )
            if not response.ok:
                logger.warning(f"Availability API returned {response.status_code} for {iso_date}")
                return []
            data = response.json()
        except ValueError as e:
            logger.error(f"Malformed JSON for {iso_date}: {e}")
            return []
        except requests.RequestException as e:
            logger.error(f"Fetch failed for {iso_date}: {e}")
            return []

        slots = extract_slot_list(data)
        logger.debug(f"{iso_date}: {len(slots)} raw slots")
        return slots
