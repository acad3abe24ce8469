"""Value types shared by the watchdog components."""

import enum
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Optional

INDEX_PATH = "/transaction/lastIndex"
NODES_PATH = "/nodes"


@dataclass(frozen=True)
class NodeIdentity:
    """Immutable node configuration, built once by ``config.load_identity``."""

    network: str
    node_host: str
    node_url: str
    reference_url: str
    registry_url: str
    unsync_tolerance: int = 10
    restart_command: str = "systemctl restart cnode.service"
    fetch_timeout: int = 10
    check_interval: int = 300

    def __post_init__(self):
        if self.unsync_tolerance < 0:
            raise ValueError(f"unsync_tolerance must be >= 0, got {self.unsync_tolerance}")

    @property
    def nodes_url(self):
        return self.registry_url + NODES_PATH

    def to_dict(self):
        return asdict(self)


@dataclass(frozen=True)
class FetchResult:
    status_code: int
    body: str

    @property
    def ok(self):
        return 200 <= self.status_code < 300


@dataclass(frozen=True)
class RegistryStatus:
    """Outcome of one node-manager query.

    ``present`` is only meaningful when the registry answered 2xx; it is
    None otherwise.
    """

    status_code: int
    present: Optional[bool] = None

    @property
    def reachable(self):
        return 200 <= self.status_code < 300


@dataclass(frozen=True)
class SyncVerdict:
    local_index: int
    reference_index: int
    tolerance: int

    @property
    def diff(self):
        return self.reference_index - self.local_index

    @property
    def synced(self):
        return self.diff <= self.tolerance


@dataclass(frozen=True)
class RestartResult:
    issued: bool
    returncode: Optional[int] = None
    error: Optional[str] = None


class CycleOutcome(str, enum.Enum):
    NODE_NOT_REGISTERED = "NodeNotRegistered"
    REGISTRY_UNREACHABLE = "RegistryUnreachable"
    INDICES_UNAVAILABLE = "IndicesUnavailable"
    SYNCED = "Synced"
    UNSYNCED_RESTARTED = "UnsyncedRestarted"


@dataclass
class CycleReport:
    """Everything one cycle decided, kept in memory for the status API."""

    started_at: datetime
    outcome: Optional[CycleOutcome] = None
    reason: Optional[str] = None
    finished_at: Optional[datetime] = None
    registry_status: Optional[int] = None
    local_index: Optional[int] = None
    reference_index: Optional[int] = None
    diff: Optional[int] = None
    tolerance: Optional[int] = None
    restart_issued: bool = False
    restart_error: Optional[str] = None
    detail: Optional[str] = None
    transitions: list = field(default_factory=list)

    def to_dict(self):
        data = asdict(self)
        data["outcome"] = self.outcome.value if self.outcome else None
        data["started_at"] = self.started_at.isoformat()
        data["finished_at"] = (
            self.finished_at.isoformat() if self.finished_at else None
        )
        return data
