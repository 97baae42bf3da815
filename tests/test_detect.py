#!/usr/bin/env python3
"""Unit tests for detection across build systems."""

import unittest
from pathlib import Path
from unittest.mock import MagicMock

from jvmbuild.build_system import Detector
from jvmbuild.errors import DetectionError
from jvmbuild.plan import BuildPlan, DetectResult


def mock_system(name, result=None, error=None):
    system = MagicMock()
    system.name.return_value = name
    if error:
        system.detect.side_effect = error
    else:
        system.detect.return_value = result or DetectResult()
    return system


class TestDetector(unittest.TestCase):
    """Test the detection aggregator."""

    def test_returns_unmodified_result(self):
        detector = Detector([mock_system("test-system")])

        self.assertEqual(detector.detect(Path("/application")), DetectResult())

    def test_returns_modified_result(self):
        plan = BuildPlan(provides=["test-provide-name"], requires=["test-require-name"])
        detector = Detector([mock_system("test-system", DetectResult(passed=True, plans=[plan]))])

        self.assertEqual(detector.detect(Path("/application")), DetectResult(passed=True, plans=[plan]))

    def test_merges_passing_plans_in_order(self):
        first = BuildPlan(provides=["first"], requires=["first"])
        second = BuildPlan(provides=["second"], requires=["second"])
        detector = Detector([
            mock_system("first", DetectResult(passed=True, plans=[first])),
            mock_system("failing"),
            mock_system("second", DetectResult(passed=True, plans=[second])),
        ])

        result = detector.detect(Path("/application"))

        self.assertTrue(result.passed)
        self.assertEqual(result.plans, [first, second])

    def test_returns_error(self):
        detector = Detector([mock_system("test-system", error=PermissionError("test-error"))])

        with self.assertRaises(DetectionError) as context:
            detector.detect(Path("/application"))

        self.assertEqual(str(context.exception), "unable to detect test-system: test-error")
        self.assertIsInstance(context.exception.cause, PermissionError)

    def test_stops_on_first_error(self):
        later = mock_system("later")
        detector = Detector([mock_system("failing", error=DetectionError("unable to stat", "pom.xml")), later])

        with self.assertRaises(DetectionError):
            detector.detect(Path("/application"))
        later.detect.assert_not_called()


if __name__ == '__main__':
    unittest.main()
