"""Build system module for different project types."""

from .factory import default_build_systems
from .interface import BuildSystem
from .detect import Detector
from .build import Build, BuildContext, BuildResult, Buildpack
from .application import Application
from .cache import Cache

__all__ = [
    'default_build_systems', 'BuildSystem', 'Detector',
    'Build', 'BuildContext', 'BuildResult', 'Buildpack', 'Application', 'Cache'
]
