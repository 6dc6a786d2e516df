import argparse
import signal
import sys

import yaml

from kube_engine.core.cancellation import CancellationToken
from kube_engine.core.config import settings
from kube_engine.core.exceptions import AppException, TeardownError
from kube_engine.core.telemetry import get_logger
from kube_engine.execution.engines import KubernetesEngine
from kube_engine.execution.lifecycle import execute_step
from kube_engine.execution.spec import Spec

logger = get_logger(__name__)


def setup_cli(argv=None):
    """Setup CLI arguments and return parsed args."""
    parser = argparse.ArgumentParser(
        description="Run one pipeline step in a Kubernetes pod"
    )
    parser.add_argument("spec", type=str, help="Path to the spec YAML file")
    parser.add_argument("--step", type=str, required=True, help="Step id to run")
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Seconds before the step is cancelled (default: no timeout)",
    )
    parser.add_argument(
        "--kubeconfig",
        type=str,
        default=settings.kubeconfig_path,
        help="Path to kubeconfig (default: from settings, in-cluster, ~/.kube/config)",
    )
    return parser.parse_args(argv)


def load_spec(path: str) -> Spec:
    with open(path, encoding="utf-8") as f:
        return Spec.model_validate(yaml.safe_load(f))


def main(argv=None) -> int:
    """Main entry point; returns the step's exit code."""
    args = setup_cli(argv)
    if args.kubeconfig:
        settings.kubeconfig_path = args.kubeconfig

    spec = load_spec(args.spec)
    token = CancellationToken(timeout=args.timeout)

    def _cancel(signum, frame):
        logger.info(f"Received signal {signum}, cancelling step...")
        token.cancel()

    previous_handlers = {
        signum: signal.signal(signum, _cancel)
        for signum in (signal.SIGINT, signal.SIGTERM)
    }

    try:
        state = execute_step(
            KubernetesEngine(), spec, args.step, sys.stdout, sys.stderr, token
        )
    except (AppException, TeardownError) as e:
        logger.error(f"Step {args.step} failed: {e}")
        return 1
    finally:
        for signum, handler in previous_handlers.items():
            signal.signal(signum, handler)

    return state.exit_code


if __name__ == "__main__":
    sys.exit(main())
