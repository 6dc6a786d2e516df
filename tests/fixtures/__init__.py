# Test data and fixtures


SAMPLE_POD_SPEC = {
    "name": "build-abc123",
    "namespace": "drone",
    "labels": {"io.drone.repo": "octocat/hello-world"},
}

SAMPLE_STEPS = [
    {
        "id": "step0",
        "name": "build",
        "image": "golang:1.21",
        "commands": ["go build", "go test ./..."],
        "envs": {"CGO_ENABLED": "0"},
        "secret_envs": {"DOCKER_PASSWORD": "docker_password"},
    },
    {
        "id": "step1",
        "name": "notify",
        "image": "alpine:3",
        "commands": ["echo done"],
    },
]

SAMPLE_SECRETS = {"docker_password": "correct-horse-battery-staple"}

SAMPLE_PULL_SECRET = {
    "name": "build-abc123-pull",
    "data": '{"auths": {"registry.example.com": {"auth": "dXNlcjpwYXNz"}}}',
}
