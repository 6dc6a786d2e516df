"""
Resource descriptors for a step execution.

Renders the pod and secret manifests from Jinja2 templates and parses them
into dicts the Kubernetes Python client accepts as request bodies.
"""

import os
from typing import Any, Dict, List

import yaml
from jinja2 import Environment, FileSystemLoader, StrictUndefined

from kube_engine.core.config import settings
from kube_engine.execution.spec import Spec, Step

TEMPLATE_DIR = os.path.join(
    os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "job_templates"
)

jinja_env = Environment(
    loader=FileSystemLoader(TEMPLATE_DIR),
    undefined=StrictUndefined,
    keep_trailing_newline=True,
)


def _render(template_name: str, **context: Any) -> Dict[str, Any]:
    template = jinja_env.get_template(template_name)
    return yaml.safe_load(template.render(**context))


def pod_labels(spec: Spec) -> Dict[str, str]:
    """Pod labels including the correlation label used by the readiness watch."""
    return {**spec.pod_spec.labels, settings.name_label: spec.name}


def _container_env(step: Step) -> List[Dict[str, Any]]:
    env = [
        {"name": key, "value": value, "secret_key": None}
        for key, value in step.envs.items()
    ]
    env.extend(
        {"name": key, "value": None, "secret_key": secret_key}
        for key, secret_key in step.secret_envs.items()
    )
    env.append(
        {"name": settings.script_env_var, "value": step.script, "secret_key": None}
    )
    return env


def to_pod(spec: Spec) -> Dict[str, Any]:
    """Pod manifest with one long-running container per step."""
    containers = [
        {
            "name": step.id,
            "image": step.image,
            "image_pull_policy": step.image_pull_policy,
            "command": step.entrypoint or settings.default_entrypoint,
            "working_dir": step.working_dir,
            "env": _container_env(step),
        }
        for step in spec.steps
    ]
    return _render(
        "pod.yaml.j2",
        name=spec.name,
        namespace=spec.namespace,
        labels=pod_labels(spec),
        annotations=spec.pod_spec.annotations,
        service_account_name=spec.pod_spec.service_account_name,
        node_selector=spec.pod_spec.node_selector,
        pull_secret_name=spec.pull_secret.name if spec.pull_secret else None,
        secret_name=spec.name,
        containers=containers,
    )


def to_secret(spec: Spec) -> Dict[str, Any]:
    """Environment secret, named after the pod."""
    return _render(
        "secret.yaml.j2",
        name=spec.name,
        namespace=spec.namespace,
        name_label=settings.name_label,
        pod_name=spec.name,
        data=spec.secrets,
    )


def to_docker_config_secret(spec: Spec) -> Dict[str, Any]:
    """Image pull secret; only valid when the spec carries one."""
    return _render(
        "pull_secret.yaml.j2",
        name=spec.pull_secret.name,
        namespace=spec.namespace,
        name_label=settings.name_label,
        pod_name=spec.name,
        data=spec.pull_secret.data,
    )
