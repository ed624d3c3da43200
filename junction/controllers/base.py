from abc import ABC, abstractmethod
from typing import Any, Optional
from junction.domain.models import ControllerMode, Direction

class Controller(ABC):
    @abstractmethod
    def run_tick(self, state: Any, now: float):
        pass

class PreemptionController(Controller):
    """Forces one approach's group green while its condition holds."""
    mode: ControllerMode

    @abstractmethod
    def run_tick(self, state: Any, now: float) -> Optional[Direction]:
        pass
