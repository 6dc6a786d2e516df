from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", env_prefix="KUBE_ENGINE_"
    )

    log_level: str = "INFO"

    # Cluster access
    kubeconfig_path: Optional[str] = None  # None -> in-cluster, then ~/.kube/config
    in_cluster: Optional[bool] = None  # Force one mode; None tries both

    # Pod correlation label, value is the pod name
    name_label: str = "io.drone.name"

    # Step script injection
    script_env_var: str = "DRONE_SCRIPT"
    default_entrypoint: List[str] = ["/bin/sh", "-c", "tail -f /dev/null"]
    shell: str = "sh"

    # Readiness
    # Server-side window per watch request; a cancel is noticed within one window
    watch_window_seconds: int = 1
    readiness_fail_on_terminal_phase: bool = False

    # Exec
    exec_poll_seconds: float = 1.0

    # OpenTelemetry
    otel_service_name: str = "kube-engine"
    otel_service_version: str = "0.1.0"
    otlp_endpoint: Optional[str] = None  # e.g. https://api.axiom.co/v1/traces
    otlp_token: Optional[str] = None
    otlp_dataset: Optional[str] = None

    @property
    def exec_command(self) -> List[str]:
        """Shell invocation that reads the step script from the environment."""
        return [self.shell, "-c", f'echo "${self.script_env_var}" | {self.shell}']

    @property
    def otlp_headers(self) -> dict:
        """Auth headers for the OTLP exporter."""
        headers = {}
        if self.otlp_token:
            headers["Authorization"] = f"Bearer {self.otlp_token}"
        if self.otlp_dataset:
            headers["X-Axiom-Dataset"] = self.otlp_dataset
        return headers


settings = Settings()
