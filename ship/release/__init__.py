"""Container image release: version, build, tag, push, record."""

from .builder import DockerImageBuilder, ImageBuilder
from .descriptor import DeploymentDescriptor, DeploymentDescriptorWriter, read_descriptor
from .pipeline import PipelineState, ReleaseFailure, ReleasePipeline, ReleasePlan, ReleaseReport, Step
from .reference import LATEST_TAG, BuildContext, ImageReference
from .registry import Credentials, DockerRegistryClient, RegistryClient
from .version import VersionStamper

__all__ = [
    "BuildContext",
    "Credentials",
    "DeploymentDescriptor",
    "DeploymentDescriptorWriter",
    "DockerImageBuilder",
    "DockerRegistryClient",
    "ImageBuilder",
    "ImageReference",
    "LATEST_TAG",
    "PipelineState",
    "RegistryClient",
    "ReleaseFailure",
    "ReleasePipeline",
    "ReleasePlan",
    "ReleaseReport",
    "Step",
    "VersionStamper",
    "read_descriptor",
]
