#!/usr/bin/env python3
"""Unit tests for config module."""

import os
import unittest
from pathlib import Path
from unittest.mock import patch

from jvmbuild.config import BuildConfiguration


class TestBuildConfiguration(unittest.TestCase):
    """Test reading configuration from the environment."""

    def test_from_mapping(self):
        configuration = BuildConfiguration.from_environment({
            "HOME": "/home/cnb",
            "BP_BUILD_ARGUMENTS": "-x test build",
            "BP_BUILT_MODULE": "web",
            "BP_BUILT_ARTIFACT": "web/target/*.war",
            "CNB_STACK_ID": "io.buildpacks.stacks.bionic",
        })

        self.assertEqual(configuration.home, Path("/home/cnb"))
        self.assertEqual(configuration.build_arguments, "-x test build")
        self.assertEqual(configuration.built_module, "web")
        self.assertEqual(configuration.built_artifact, "web/target/*.war")
        self.assertEqual(configuration.stack_id, "io.buildpacks.stacks.bionic")

    def test_absent_overrides(self):
        configuration = BuildConfiguration.from_environment({"HOME": "/home/cnb"})

        self.assertIsNone(configuration.build_arguments)
        self.assertIsNone(configuration.built_module)
        self.assertIsNone(configuration.built_artifact)
        self.assertEqual(configuration.stack_id, "")

    def test_empty_override_is_present(self):
        configuration = BuildConfiguration.from_environment({"HOME": "/home/cnb", "BP_BUILD_ARGUMENTS": ""})
        self.assertEqual(configuration.build_arguments, "")

    @patch('jvmbuild.config.load_dotenv')
    def test_from_process_environment(self, mock_load_dotenv):
        with patch.dict(os.environ, {"HOME": "/home/test", "BP_BUILT_MODULE": "api"}):
            configuration = BuildConfiguration.from_environment()

        mock_load_dotenv.assert_called_once()
        self.assertEqual(configuration.home, Path("/home/test"))
        self.assertEqual(configuration.built_module, "api")


if __name__ == '__main__':
    unittest.main()
