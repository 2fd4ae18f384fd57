"""
Common interface of the swing analyzers
"""

from abc import ABC, abstractmethod
from dataclasses import asdict, is_dataclass
from typing import Any, Dict, Optional

from barrels.utils.scoring_configs import SCORING_CONFIG_VERSION


class BaseAnalyzer(ABC):
    """
    Turns one input record into a metrics model using a frozen calibration.

    get_analyzer_info reports the calibration with SCORING_CONFIG_VERSION so a
    stored result can be traced back to the constants that produced it.
    """

    def __init__(self, analyzer_type: str, calibration: Optional[Any] = None):
        self.analyzer_type = analyzer_type
        self.calibration = calibration

    @abstractmethod
    def analyze(self, data: Any) -> Any:
        """Analyze one input; raise MissingDataError when it cannot be scored"""

    @abstractmethod
    def validate_input(self, data: Any) -> bool:
        """True when analyze() can produce a result for data"""

    def get_analyzer_info(self) -> Dict[str, Any]:
        info: Dict[str, Any] = {
            "type": self.analyzer_type,
            "name": self.__class__.__name__,
            "version": SCORING_CONFIG_VERSION,
        }
        if is_dataclass(self.calibration):
            info["calibration"] = asdict(self.calibration)
        return info
