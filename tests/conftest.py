# Shared pytest configuration and fixtures
import pytest

from kube_engine.core.constants import PodPhase, WatchEventType
from kube_engine.execution.engines.kubernetes import KubernetesEngine
from kube_engine.execution.platform.interface import PodSnapshot, WatchEvent
from kube_engine.execution.spec import Spec
from tests.fixtures import (
    SAMPLE_POD_SPEC,
    SAMPLE_PULL_SECRET,
    SAMPLE_SECRETS,
    SAMPLE_STEPS,
)
from tests.fixtures.platform import FakePlatform


@pytest.fixture
def spec():
    """Spec for pod build-abc123 in namespace drone, without pull secret."""
    return Spec.model_validate(
        {
            "pod_spec": SAMPLE_POD_SPEC,
            "steps": SAMPLE_STEPS,
            "secrets": SAMPLE_SECRETS,
        }
    )


@pytest.fixture
def spec_with_pull_secret():
    return Spec.model_validate(
        {
            "pod_spec": SAMPLE_POD_SPEC,
            "steps": SAMPLE_STEPS,
            "secrets": SAMPLE_SECRETS,
            "pull_secret": SAMPLE_PULL_SECRET,
        }
    )


@pytest.fixture
def fake_platform():
    return FakePlatform()


@pytest.fixture
def engine(fake_platform):
    return KubernetesEngine(platform=fake_platform)


@pytest.fixture
def pod_event():
    """Build a watch event for a pod."""

    def _make(
        name="build-abc123",
        phase=PodPhase.PENDING,
        event_type=WatchEventType.MODIFIED,
        resource_version="101",
    ):
        return WatchEvent(
            type=event_type,
            pod=PodSnapshot(
                name=name,
                namespace="drone",
                phase=phase,
                resource_version=resource_version,
            ),
        )

    return _make
