"""
Navigation targets triggered by auth transitions.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import List, Optional

logger = logging.getLogger(__name__)


class Route(str, Enum):
    HOME = "/"
    PROFILE = "/profile"
    SUCCESS = "/success"


class Navigator(ABC):
    """Whatever owns the view stack (router, CLI screen, test double)."""

    @abstractmethod
    def navigate(self, route: Route) -> None:
        ...


class RecordingNavigator(Navigator):
    """Keeps every navigation in ``history``."""

    def __init__(self):
        self.history: List[Route] = []

    @property
    def current(self) -> Optional[Route]:
        return self.history[-1] if self.history else None

    def navigate(self, route: Route) -> None:
        logger.debug("navigate -> %s", route.value)
        self.history.append(route)
