"""Detection across every registered build system."""

from pathlib import Path
from typing import List
import logging

from ..errors import BuildSystemError, DetectionError
from ..plan import DetectResult
from .interface import BuildSystem

logger = logging.getLogger('jvmbuild')


class Detector:
    """Runs each build system's detection and merges the passing plans."""

    def __init__(self, systems: List[BuildSystem]):
        self.systems = systems

    def detect(self, application_path: Path) -> DetectResult:
        """Detect build systems for the application, in registration order.

        Raises:
            DetectionError: If any build system fails to inspect the application
        """
        result = DetectResult()

        for system in self.systems:
            try:
                r = system.detect(application_path)
            except (BuildSystemError, OSError) as e:
                raise DetectionError("unable to detect", system.name(), e) from e

            if r.passed:
                logger.debug(f"Detected {system.name()} project in {application_path}")
                result.passed = True
                result.plans.extend(r.plans)

        return result
