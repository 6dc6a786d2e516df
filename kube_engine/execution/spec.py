"""
Step execution specification.

Describes the pod that hosts a pipeline's steps, the secret material it needs,
and the terminal state of one step execution.
"""

import shlex
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from kube_engine.core.exceptions import ValidationError


class PodSpec(BaseModel):
    """Pod identity and placement."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Pod name, unique within the namespace")
    namespace: str = Field(default="default", description="Target namespace")
    labels: Dict[str, str] = Field(default_factory=dict)
    annotations: Dict[str, str] = Field(default_factory=dict)
    service_account_name: Optional[str] = Field(default=None)
    node_selector: Dict[str, str] = Field(default_factory=dict)


class PullSecret(BaseModel):
    """Registry credentials used to pull step images."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Secret name")
    data: str = Field(..., description="Docker config JSON (.dockerconfigjson)")


class Step(BaseModel):
    """
    One container of the pod and the script executed in it.

    The step id is the container name.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Container name")
    name: str = Field(default="", description="Human readable step name")
    image: str = Field(default="alpine:3", description="Container image")
    image_pull_policy: str = Field(default="IfNotPresent")
    commands: List[str] = Field(default_factory=list)
    envs: Dict[str, str] = Field(default_factory=dict)
    secret_envs: Dict[str, str] = Field(
        default_factory=dict,
        description="Env var name -> key in the pod's environment secret",
    )
    working_dir: Optional[str] = Field(default=None)
    entrypoint: Optional[List[str]] = Field(
        default=None, description="Keep-alive command; defaults from settings"
    )

    @property
    def script(self) -> str:
        """Shell script run by the exec command."""
        lines = ["set -e"]
        for command in self.commands:
            lines.append(f"echo + {shlex.quote(command)}")
            lines.append(command)
        return "\n".join(lines) + "\n"


class Spec(BaseModel):
    """Full execution request for one pipeline."""

    model_config = ConfigDict(frozen=True)

    pod_spec: PodSpec
    steps: List[Step] = Field(default_factory=list)
    pull_secret: Optional[PullSecret] = Field(default=None)
    secrets: Dict[str, str] = Field(
        default_factory=dict, description="Environment secret material"
    )

    @model_validator(mode="after")
    def _unique_step_ids(self) -> "Spec":
        ids = [step.id for step in self.steps]
        duplicates = sorted({step_id for step_id in ids if ids.count(step_id) > 1})
        if duplicates:
            raise ValueError(f"duplicate step ids: {', '.join(duplicates)}")
        return self

    @property
    def name(self) -> str:
        return self.pod_spec.name

    @property
    def namespace(self) -> str:
        return self.pod_spec.namespace

    def get_step(self, step_id: str) -> Step:
        for step in self.steps:
            if step.id == step_id:
                return step
        raise ValidationError(f"step {step_id} is not declared in pod {self.name}")


class State(BaseModel):
    """Terminal result of executing a step."""

    model_config = ConfigDict(frozen=True)

    exited: bool = True
    exit_code: int = 0
    oom_killed: bool = False
