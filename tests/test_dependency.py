#!/usr/bin/env python3
"""Unit tests for dependency module."""

import hashlib
import unittest
import shutil
import tempfile
from pathlib import Path
from unittest.mock import MagicMock, patch

import httpx

from jvmbuild.dependency import (
    BuildpackDependency, DependencyCache, DependencyLayerContributor, DependencyResolver
)
from jvmbuild.errors import ResolutionError
from jvmbuild.layers import Layers
from jvmbuild.plan import BuildpackPlan


def dependency(id="gradle", version="1.1.1", stacks=("test-stack-id",), content=b"content"):
    return BuildpackDependency(
        id=id,
        name=id.capitalize(),
        version=version,
        uri=f"https://localhost/stub-{id}-{version}.zip",
        sha256=hashlib.sha256(content).hexdigest(),
        stacks=list(stacks),
    )


class TestDependencyResolver(unittest.TestCase):
    """Test selecting dependencies."""

    def test_resolve_newest(self):
        resolver = DependencyResolver(
            [dependency(version="6.9.0"), dependency(version="6.10.1"), dependency(id="maven", version="9.0.0")],
            "test-stack-id"
        )
        self.assertEqual(resolver.resolve("gradle").version, "6.10.1")

    def test_resolve_version_pattern(self):
        resolver = DependencyResolver([dependency(version="5.6.4"), dependency(version="6.7.1")], "test-stack-id")
        self.assertEqual(resolver.resolve("gradle", "5.*").version, "5.6.4")

    def test_resolve_filters_stack(self):
        resolver = DependencyResolver([dependency(stacks=["other-stack"])], "test-stack-id")
        with self.assertRaises(ResolutionError):
            resolver.resolve("gradle")

    def test_resolve_unknown(self):
        resolver = DependencyResolver([dependency()], "test-stack-id")
        with self.assertRaises(ResolutionError) as context:
            resolver.resolve("maven")
        self.assertIn("gradle@1.1.1", str(context.exception))


class TestDependencyCache(unittest.TestCase):
    """Test locating and downloading artifacts."""

    def setUp(self):
        """Set up test environment."""
        self.temp_dir = Path(tempfile.mkdtemp())
        self.cache_path = self.temp_dir / "cache"
        self.download_path = self.temp_dir / "downloads"
        self.cache = DependencyCache(self.cache_path, self.download_path)

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def test_artifact_from_buildpack_cache(self):
        dep = dependency()
        cached = self.cache_path / dep.sha256 / "stub-gradle-1.1.1.zip"
        cached.parent.mkdir(parents=True)
        cached.write_bytes(b"content")

        self.assertEqual(self.cache.artifact(dep), cached)

    def mock_stream(self, mock_stream, chunks):
        response = MagicMock()
        response.headers = {"Content-Length": str(sum(len(c) for c in chunks))}
        response.iter_bytes.return_value = iter(chunks)
        mock_stream.return_value.__enter__.return_value = response
        return response

    @patch('jvmbuild.dependency.httpx.stream')
    def test_artifact_downloads(self, mock_stream):
        dep = dependency()
        self.mock_stream(mock_stream, [b"con", b"tent"])

        artifact = self.cache.artifact(dep)

        self.assertEqual(artifact, self.download_path / dep.sha256 / "stub-gradle-1.1.1.zip")
        self.assertEqual(artifact.read_bytes(), b"content")
        self.assertTrue((self.download_path / f"{dep.sha256}.yaml").exists())
        mock_stream.assert_called_once()

        # A second lookup reuses the download
        self.assertEqual(self.cache.artifact(dep), artifact)
        mock_stream.assert_called_once()

    @patch('jvmbuild.dependency.httpx.stream')
    def test_artifact_checksum_mismatch(self, mock_stream):
        dep = dependency()
        self.mock_stream(mock_stream, [b"tampered"])

        with self.assertRaises(ResolutionError):
            self.cache.artifact(dep)
        self.assertFalse((self.download_path / dep.sha256 / "stub-gradle-1.1.1.zip").exists())

    @patch('jvmbuild.dependency.httpx.stream')
    def test_artifact_http_error(self, mock_stream):
        mock_stream.side_effect = httpx.ConnectError("connection refused")

        with self.assertRaises(ResolutionError):
            self.cache.artifact(dependency())


class TestDependencyLayerContributor(unittest.TestCase):
    """Test contributing a dependency to a layer."""

    def setUp(self):
        """Set up test environment."""
        self.temp_dir = Path(tempfile.mkdtemp())
        self.dep = dependency()
        cached = self.temp_dir / "cache" / self.dep.sha256 / "stub-gradle-1.1.1.zip"
        cached.parent.mkdir(parents=True)
        cached.write_bytes(b"content")
        self.cache = DependencyCache(self.temp_dir / "cache", self.temp_dir / "downloads")
        self.layers = Layers(self.temp_dir / "layers")

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def test_adds_plan_entry(self):
        plan = BuildpackPlan()
        DependencyLayerContributor(self.dep, self.cache, plan)

        self.assertEqual(len(plan.entries), 1)
        self.assertEqual(plan.entries[0].name, "gradle")
        self.assertEqual(plan.entries[0].metadata["version"], "1.1.1")

    def test_contribute_passes_artifact(self):
        contributor = DependencyLayerContributor(self.dep, self.cache, BuildpackPlan())
        layer = self.layers.layer("gradle")
        seen = []

        def fn(artifact):
            seen.append(artifact.read())
            return layer

        result = contributor.contribute(layer, fn)

        self.assertEqual(seen, [b"content"])
        self.assertEqual(result.metadata, self.dep.to_dict())

    def test_contribute_reuses_layer(self):
        contributor = DependencyLayerContributor(self.dep, self.cache, BuildpackPlan())
        layer = self.layers.layer("gradle")
        layer.metadata = self.dep.to_dict()

        def fn(artifact):
            self.fail("contribution should have been skipped")

        contributor.contribute(layer, fn)


if __name__ == '__main__':
    unittest.main()
