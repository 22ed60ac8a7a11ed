"""Kubernetes orchestration rules."""

from __future__ import annotations

import re

from ...models import ExplanationTemplate, LogCategory, PatternRule, SeverityLevel

_I = re.IGNORECASE

KUBERNETES_PATTERNS: tuple[PatternRule, ...] = (
    PatternRule(
        id="K8S_POD_CRASHLOOP",
        name="Pod CrashLoopBackOff",
        category=LogCategory.KUBERNETES,
        matchers=(
            re.compile(r"CrashLoopBackOff", _I),
            re.compile(r"Back-off\s+restarting\s+failed\s+container", _I),
            re.compile(r"back-off.*restart", _I),
            re.compile(r"container.*crash.*loop", _I),
        ),
        keywords=("CrashLoopBackOff", "restart", "back-off", "pod crash"),
        severity=SeverityLevel.CRITICAL,
        explanation=ExplanationTemplate(
            summary=(
                "A Kubernetes pod is stuck in a CrashLoopBackOff state: the container keeps "
                "crashing and Kubernetes is repeatedly restarting it with increasing delays."
            ),
            root_cause=(
                "The container process exits with a non-zero exit code immediately after "
                "starting, triggering Kubernetes restart policy."
            ),
            possible_causes=(
                "Application crashes on startup due to missing configuration or environment "
                "variables",
                "Missing or inaccessible dependency (database, API, secret)",
                "Incorrect container entrypoint or command",
                "Insufficient memory causing OOM kills",
                "Liveness probe failing immediately after startup",
                "Application binary not found in the container image",
            ),
            recommended_fixes=(
                "Check container logs: kubectl logs <pod-name> --previous",
                "Describe the pod to see events: kubectl describe pod <pod-name>",
                "Verify environment variables and ConfigMaps are correctly mounted",
                "Check if the container image tag exists and is pullable",
                "Increase memory/CPU resource limits if OOM killed",
                "Adjust liveness probe initialDelaySeconds to give the app time to start",
            ),
        ),
    ),
    PatternRule(
        id="K8S_IMAGE_PULL_FAIL",
        name="Image Pull Failed",
        category=LogCategory.KUBERNETES,
        matchers=(
            re.compile(r"ImagePullBackOff", _I),
            re.compile(r"ErrImagePull", _I),
            re.compile(r"Failed\s+to\s+pull\s+image", _I),
            re.compile(r"image.*(?:not\s+found|pull\s+error)", _I),
            re.compile(r"repository\s+does\s+not\s+exist", _I),
        ),
        keywords=("ImagePullBackOff", "ErrImagePull", "image pull", "pull failed"),
        severity=SeverityLevel.HIGH,
        explanation=ExplanationTemplate(
            summary=(
                "Kubernetes failed to pull the container image from the registry. The pod "
                "cannot start until the image is available."
            ),
            root_cause=(
                "The container image specified in the pod spec could not be downloaded from "
                "the container registry."
            ),
            possible_causes=(
                "Image tag does not exist in the registry",
                "Registry authentication credentials are missing or expired",
                "Private registry requires imagePullSecrets not configured in the pod spec",
                "Network connectivity issue between the node and the registry",
                "Image name has a typo",
                "Registry rate limiting (Docker Hub) is blocking the pull",
            ),
            recommended_fixes=(
                "Verify the image exists: docker pull <image>:<tag>",
                "Check imagePullSecrets are configured: kubectl get pod <name> -o yaml",
                "Ensure registry credentials are valid and not expired",
                "For Docker Hub rate limits, use authenticated pulls or a mirror",
                "Check node network connectivity to the container registry",
                "Use a specific image tag instead of :latest for reliability",
            ),
        ),
    ),
    PatternRule(
        id="K8S_OOM_KILLED",
        name="Container OOMKilled",
        category=LogCategory.KUBERNETES,
        matchers=(
            re.compile(r"OOMKilled", _I),
            re.compile(r"container.*killed.*oom", _I),
            re.compile(r"memory\s+cgroup\s+out\s+of\s+memory", _I),
            re.compile(r"Killed\s+process.*oom", _I),
            re.compile(r"exit\s+code\s+137", _I),
        ),
        keywords=("OOMKilled", "exit code 137", "out of memory", "cgroup", "killed"),
        error_codes=("137",),
        severity=SeverityLevel.CRITICAL,
        explanation=ExplanationTemplate(
            summary=(
                "The container was killed by Kubernetes because it exceeded its memory limit. "
                "Exit code 137 indicates the process was terminated by SIGKILL from the OOM "
                "killer."
            ),
            root_cause=(
                "The container consumed more memory than the configured resource limit, "
                "triggering the Kubernetes OOM killer."
            ),
            possible_causes=(
                "Memory limit set too low for the workload",
                "Memory leak in the application",
                "Spike in traffic causing increased memory usage",
                "Large objects cached in memory without eviction",
                "JVM heap size exceeds container memory limit",
            ),
            recommended_fixes=(
                "Increase memory limits: resources.limits.memory in the pod spec",
                "Profile the application for memory leaks",
                "For JVM apps, set -Xmx to 75% of the container memory limit",
                "Implement memory-efficient data processing (streaming vs. loading all)",
                "Add memory usage monitoring and alerts before hitting the limit",
                "Use Vertical Pod Autoscaler (VPA) to right-size resources",
            ),
        ),
    ),
    PatternRule(
        id="K8S_NODE_NOT_READY",
        name="Node NotReady",
        category=LogCategory.KUBERNETES,
        matchers=(
            re.compile(r"node.*NotReady", _I),
            re.compile(r"NodeNotReady", _I),
            re.compile(r"node\s+condition.*Ready.*False", _I),
            re.compile(r"kubelet\s+stopped\s+posting\s+node\s+status", _I),
        ),
        keywords=("NotReady", "NodeNotReady", "node condition", "kubelet"),
        severity=SeverityLevel.CRITICAL,
        explanation=ExplanationTemplate(
            summary=(
                "A Kubernetes node has entered NotReady state. Pods on this node may be "
                "evicted and rescheduled to healthy nodes."
            ),
            root_cause=(
                "The kubelet on the node has stopped reporting its status to the API server, "
                "or the node has failed health checks."
            ),
            possible_causes=(
                "Kubelet process crashed or is unresponsive",
                "Node ran out of disk space, memory, or PIDs",
                "Network partition between the node and the control plane",
                "Underlying VM/machine has crashed or been terminated",
                "Docker/containerd runtime is unresponsive",
                "Kernel panic or hardware failure",
            ),
            recommended_fixes=(
                "SSH into the node and check kubelet status: systemctl status kubelet",
                "Check node resource pressure: kubectl describe node <node-name>",
                "Review kubelet logs: journalctl -u kubelet",
                "Verify network connectivity between the node and the API server",
                "Cordon and drain the node if it needs maintenance: kubectl drain <node>",
                "Replace the node if the underlying hardware has failed",
            ),
        ),
    ),
    PatternRule(
        id="K8S_LIVENESS_FAIL",
        name="Liveness/Readiness Probe Failed",
        category=LogCategory.KUBERNETES,
        matchers=(
            re.compile(r"Liveness\s+probe\s+failed", _I),
            re.compile(r"Readiness\s+probe\s+failed", _I),
            re.compile(r"probe\s+failed.*HTTP\s+probe", _I),
            re.compile(r"Startup\s+probe\s+failed", _I),
            re.compile(r"Unhealthy", _I),
        ),
        keywords=("liveness probe", "readiness probe", "health check", "unhealthy"),
        severity=SeverityLevel.HIGH,
        explanation=ExplanationTemplate(
            summary=(
                "A Kubernetes health probe (liveness, readiness, or startup) has failed. If "
                "liveness fails, the container will be restarted. If readiness fails, traffic "
                "will stop being routed to the pod."
            ),
            root_cause=(
                "The probe endpoint returned a non-success HTTP status, or the TCP/command "
                "check failed within the timeout."
            ),
            possible_causes=(
                "Application is overloaded and cannot respond to health checks in time",
                "Health check endpoint has a bug or dependency on a slow service",
                "Probe timeout is too short for the application startup time",
                "Wrong port or path configured for the probe",
                "Application deadlock preventing the health endpoint from responding",
            ),
            recommended_fixes=(
                "Increase probe timeoutSeconds and failureThreshold",
                "Ensure the health endpoint is lightweight and has no external dependencies",
                "Add a startup probe with generous timing for slow-starting applications",
                "Verify probe port matches the containerPort",
                "Check application logs at the time of probe failures",
                "Separate liveness (is it running?) from readiness (can it serve traffic?)",
            ),
        ),
    ),
    PatternRule(
        id="K8S_EVICTION",
        name="Pod Evicted",
        category=LogCategory.KUBERNETES,
        matchers=(
            re.compile(r"pod.*evict", _I),
            re.compile(r"Evicted", _I),
            re.compile(r"The\s+node\s+was\s+low\s+on\s+resource", _I),
            re.compile(r"eviction.*threshold", _I),
            re.compile(r"DiskPressure", _I),
            re.compile(r"MemoryPressure", _I),
            re.compile(r"PIDPressure", _I),
        ),
        keywords=("evicted", "eviction", "DiskPressure", "MemoryPressure", "PIDPressure"),
        severity=SeverityLevel.HIGH,
        explanation=ExplanationTemplate(
            summary=(
                "A pod was evicted from its node due to resource pressure (disk, memory, or "
                "PIDs). The pod will need to be rescheduled to another node."
            ),
            root_cause=(
                "The node exceeded its eviction threshold for one or more resources, forcing "
                "Kubernetes to reclaim capacity by evicting pods."
            ),
            possible_causes=(
                "Node disk usage exceeded the eviction threshold (typically 85-90%)",
                "Container logs consuming excessive disk space",
                "Temporary files or emptyDir volumes growing without bound",
                "Too many processes (PID exhaustion) on the node",
                "Memory pressure from other pods on the same node",
            ),
            recommended_fixes=(
                "Clean up old pods: kubectl delete pod --field-selector=status.phase==Failed",
                "Implement log rotation and size limits for container logs",
                "Set resource requests and limits on all pods for fair scheduling",
                "Add more nodes to the cluster to distribute load",
                "Use pod priority and preemption to protect critical workloads",
                "Monitor node resources with Prometheus/Grafana or cloud monitoring",
            ),
        ),
    ),
    PatternRule(
        id="K8S_RBAC_DENIED",
        name="RBAC Permission Denied",
        category=LogCategory.KUBERNETES,
        matchers=(
            re.compile(r"forbidden.*RBAC", _I),
            re.compile(
                r"cannot.*(?:get|list|watch|create|update|delete)"
                r".*(?:pods|services|deployments|secrets)",
                _I,
            ),
            re.compile(r"User.*cannot", _I),
            re.compile(r"is\s+forbidden", _I),
        ),
        keywords=("forbidden", "RBAC", "cannot", "permission", "service account"),
        severity=SeverityLevel.HIGH,
        explanation=ExplanationTemplate(
            summary=(
                "A Kubernetes RBAC policy denied the requested operation. The user or service "
                "account lacks the required permissions."
            ),
            root_cause=(
                "The authenticated identity does not have a ClusterRole/Role or "
                "ClusterRoleBinding/RoleBinding granting the necessary permissions."
            ),
            possible_causes=(
                "Service account not assigned the required Role or ClusterRole",
                "RoleBinding is in the wrong namespace",
                "ClusterRole permissions are too restrictive",
                "RBAC policy was recently changed or tightened",
                "Using the default service account which has minimal permissions",
            ),
            recommended_fixes=(
                "Check current permissions: kubectl auth can-i "
                "--as=system:serviceaccount:<ns>:<sa> <verb> <resource>",
                "Create or update the Role/ClusterRole with the needed permissions",
                "Bind the role to the service account with a RoleBinding",
                "Avoid using cluster-admin in production; follow least privilege",
                "Review RBAC policies: kubectl get clusterrolebindings -o wide",
            ),
        ),
    ),
)
