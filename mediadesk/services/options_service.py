"""Client for the reference option lists used by the profile form."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List

from mediadesk.models import Option
from mediadesk.services.api_client import ApiResult, BackendClient

logger = logging.getLogger(__name__)

LOCATIONS_PATH = "/api/preferred-locations"
SKILLS_PATH = "/api/programming-skills"


def _options(data) -> List[Option]:
    if not isinstance(data, list):
        return []
    return [Option.from_dict(item) for item in data if isinstance(item, dict)]


@dataclass
class ProfileOptions:
    """One result per option source; the caller decides if partial data is usable."""
    locations: ApiResult[List[Option]]
    skills: ApiResult[List[Option]]

    @property
    def complete(self) -> bool:
        return self.locations.ok and self.skills.ok


class OptionsService(BackendClient):

    def get_preferred_locations(self) -> ApiResult[List[Option]]:
        return self._get("/preferred-locations", resource_path=LOCATIONS_PATH).map(_options)

    def get_programming_skills(self) -> ApiResult[List[Option]]:
        return self._get("/programming-skills", resource_path=SKILLS_PATH).map(_options)

    def fetch_profile_options(self) -> ProfileOptions:
        """Fetch locations and skills concurrently and report each outcome."""
        with ThreadPoolExecutor(max_workers=2) as pool:
            locations = pool.submit(self.get_preferred_locations)
            skills = pool.submit(self.get_programming_skills)
            options = ProfileOptions(locations=locations.result(), skills=skills.result())

        for name, result in (("locations", options.locations), ("skills", options.skills)):
            if not result.ok:
                logger.warning("Loading %s options failed: %s", name, result.error)
        return options
