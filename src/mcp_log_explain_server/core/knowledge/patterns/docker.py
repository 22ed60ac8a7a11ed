"""Docker and container runtime rules."""

from __future__ import annotations

import re

from ...models import ExplanationTemplate, LogCategory, PatternRule, SeverityLevel

_I = re.IGNORECASE

DOCKER_PATTERNS: tuple[PatternRule, ...] = (
    PatternRule(
        id="DOCKER_DAEMON_ERROR",
        name="Docker Daemon Error",
        category=LogCategory.DOCKER,
        matchers=(
            re.compile(r"docker\s+daemon.*(?:error|fail|not\s+running)", _I),
            re.compile(r"Cannot\s+connect\s+to\s+the\s+Docker\s+daemon", _I),
            re.compile(r"Is\s+the\s+docker\s+daemon\s+running", _I),
            re.compile(r"docker\.sock.*(?:permission|denied|not\s+found)", _I),
        ),
        keywords=("docker daemon", "docker.sock", "dockerd", "daemon not running"),
        severity=SeverityLevel.CRITICAL,
        explanation=ExplanationTemplate(
            summary=(
                "The Docker daemon is not running or not accessible. All container operations "
                "will fail until the daemon is restored."
            ),
            root_cause=(
                "The Docker daemon process (dockerd) is not running, or the current user lacks "
                "permission to access the Docker socket."
            ),
            possible_causes=(
                "Docker daemon crashed or was stopped",
                "Docker socket permissions prevent access (need sudo or docker group)",
                "systemd service for Docker failed to start",
                "Disk space exhaustion preventing daemon operations",
                "Docker configuration file is corrupted or invalid",
            ),
            recommended_fixes=(
                "Start the Docker daemon: sudo systemctl start docker",
                "Check daemon status: sudo systemctl status docker",
                "Add user to docker group: sudo usermod -aG docker $USER",
                "Check daemon logs: journalctl -u docker.service",
                "Verify disk space is available for Docker: df -h /var/lib/docker",
            ),
        ),
    ),
    PatternRule(
        id="DOCKER_BUILD_FAIL",
        name="Docker Build Failed",
        category=LogCategory.DOCKER,
        matchers=(
            re.compile(r"(?:docker|buildx?)\s+build.*(?:error|fail)", _I),
            re.compile(r"COPY\s+failed.*(?:file\s+not\s+found|no\s+such\s+file)", _I),
            re.compile(r"RUN.*returned\s+a\s+non-zero\s+code", _I),
            re.compile(r"failed\s+to\s+compute\s+cache\s+key", _I),
            re.compile(r"executor\s+failed\s+running", _I),
        ),
        keywords=("docker build", "Dockerfile", "build failed", "COPY failed", "RUN failed"),
        severity=SeverityLevel.HIGH,
        explanation=ExplanationTemplate(
            summary=(
                "A Docker image build failed during one of its steps. The container image was "
                "not created."
            ),
            root_cause="A Dockerfile instruction (RUN, COPY, ADD) failed during build execution.",
            possible_causes=(
                "File referenced in COPY/ADD does not exist in the build context",
                "RUN command failed (package install error, compilation failure)",
                ".dockerignore is excluding required files",
                "Base image not available or incompatible architecture",
                "Network issues during package downloads in RUN steps",
                "Incorrect working directory (WORKDIR) path",
            ),
            recommended_fixes=(
                "Check that all files referenced in COPY exist relative to the Dockerfile",
                "Review .dockerignore to ensure required files are not excluded",
                "Run failing RUN commands locally to debug the issue",
                "Use multi-stage builds to isolate build dependencies",
                "Pin base image versions instead of using :latest",
                "Add --no-cache flag to rebuild from scratch: docker build --no-cache",
            ),
        ),
    ),
    PatternRule(
        id="DOCKER_CONTAINER_EXIT",
        name="Container Exited Unexpectedly",
        category=LogCategory.DOCKER,
        matchers=(
            re.compile(r"container.*exited\s+with\s+code\s+[1-9]", _I),
            re.compile(r"Exited\s+\([1-9]\d*\)", _I),
            re.compile(r"container.*died", _I),
            re.compile(r"process.*exited.*status\s+[1-9]", _I),
        ),
        keywords=("exited", "container died", "exit code", "non-zero"),
        severity=SeverityLevel.HIGH,
        explanation=ExplanationTemplate(
            summary=(
                "A Docker container exited with a non-zero exit code, indicating an error or "
                "crash. The containerized application terminated unexpectedly."
            ),
            root_cause="The main process inside the container exited with an error code.",
            possible_causes=(
                "Application crashed due to unhandled exception",
                "Missing environment variables or configuration",
                "Entrypoint script has an error",
                "Dependency service not available (database, API)",
                "Exit code 137 = OOM killed, 139 = segfault, 143 = SIGTERM",
            ),
            recommended_fixes=(
                "Check container logs: docker logs <container-id>",
                'Inspect the exit code: docker inspect <container-id> --format="{{.State.ExitCode}}"',
                "Run interactively to debug: docker run -it <image> /bin/sh",
                "Verify all required environment variables are passed with -e or --env-file",
                "Check if the entrypoint command exists and is executable",
            ),
        ),
    ),
    PatternRule(
        id="DOCKER_NETWORK_ERROR",
        name="Docker Network Error",
        category=LogCategory.DOCKER,
        matchers=(
            re.compile(r"docker.*network.*(?:error|fail|not\s+found)", _I),
            re.compile(r"failed\s+to\s+(?:create|join|connect)\s+(?:to\s+)?network", _I),
            re.compile(r"network\s+.*?\s+not\s+found", _I),
            re.compile(r"endpoint.*already\s+exists\s+in\s+network", _I),
        ),
        keywords=("docker network", "network not found", "endpoint", "bridge"),
        severity=SeverityLevel.MEDIUM,
        explanation=ExplanationTemplate(
            summary=(
                "A Docker networking operation failed. Containers may not be able to "
                "communicate with each other or the outside world."
            ),
            root_cause=(
                "The specified Docker network does not exist, is misconfigured, or has a conflict."
            ),
            possible_causes=(
                "Referenced network was not created before starting the container",
                "Network name typo in docker-compose.yml or docker run command",
                "IP address conflict within the Docker network",
                "Docker network driver issue (bridge, overlay, macvlan)",
                "iptables/firewall rules interfering with Docker networking",
            ),
            recommended_fixes=(
                "Create the network: docker network create <network-name>",
                "List existing networks: docker network ls",
                "Inspect network: docker network inspect <network-name>",
                "Restart Docker daemon to reset networking: sudo systemctl restart docker",
                "Remove stale networks: docker network prune",
            ),
        ),
    ),
    PatternRule(
        id="DOCKER_VOLUME_ERROR",
        name="Docker Volume Mount Error",
        category=LogCategory.DOCKER,
        matchers=(
            re.compile(r"volume.*(?:error|fail|not\s+found|permission)", _I),
            re.compile(r"bind\s+mount.*(?:denied|error|fail)", _I),
            re.compile(r"mount.*(?:denied|error|fail).*container", _I),
            re.compile(r"invalid\s+mount\s+config", _I),
        ),
        keywords=("volume", "mount", "bind mount", "volume error"),
        severity=SeverityLevel.HIGH,
        explanation=ExplanationTemplate(
            summary=(
                "A Docker volume mount operation failed. The container cannot access the host "
                "filesystem or persistent storage as configured."
            ),
            root_cause=(
                "The volume mount path is invalid, the source does not exist, or permissions "
                "prevent mounting."
            ),
            possible_causes=(
                "Host directory does not exist",
                "SELinux or AppArmor blocking the mount",
                "Incorrect volume syntax in docker-compose.yml",
                "Windows path format issues when using Docker Desktop",
                "Volume driver is not installed or configured",
            ),
            recommended_fixes=(
                "Ensure the host path exists before mounting",
                "Use named volumes instead of bind mounts for portability",
                "Check SELinux context: add :z or :Z suffix to the volume mount",
                "Verify file ownership inside the container matches the running user",
                "On Windows, ensure the drive is shared in Docker Desktop settings",
            ),
        ),
    ),
)
