"""Data types for ClusterBackend interface."""

from dataclasses import dataclass, field
from pathlib import Path

CA_FILE = "ca.pem"
CERT_FILE = "cert.pem"
KEY_FILE = "key.pem"


@dataclass(frozen=True)
class Cluster:
    """Cluster as reported by a backend, normalized across backends."""

    name: str
    status: str
    nodes: int = 0
    endpoint: str | None = None
    id: str | None = None
    template: str | None = None
    autoscale: bool | None = None
    status_reason: str | None = None
    backend: str | None = None


@dataclass(frozen=True)
class ClusterTemplate:
    """Cluster template (orchestration engine and host type)."""

    name: str
    coe: str
    host_type: str | None = None
    id: str | None = None


@dataclass(frozen=True)
class Quotas:
    """Account quotas. None means the backend does not report the limit."""

    max_clusters: int | None = None
    max_nodes_per_cluster: int | None = None


@dataclass
class CredentialsBundle:
    """TLS material and connection scripts for a cluster."""

    files: dict[str, bytes] = field(default_factory=dict)

    def get_ca(self) -> bytes | None:
        return self.files.get(CA_FILE)

    def get_cert(self) -> bytes | None:
        return self.files.get(CERT_FILE)

    def get_key(self) -> bytes | None:
        return self.files.get(KEY_FILE)

    def write(self, directory: str | Path) -> Path:
        """Write every file of the bundle into a directory.

        Args:
            directory: Target directory, created if missing

        Returns:
            Path of the directory
        """
        target = Path(directory).expanduser()
        target.mkdir(parents=True, exist_ok=True)
        for name, content in self.files.items():
            path = target / name
            path.write_bytes(content)
            if name == KEY_FILE:
                path.chmod(0o600)
        return target
