from types import MappingProxyType
from typing import List
from typing import Mapping
from typing import NamedTuple
from typing import Tuple


def freeze_pod_defaults(pod_defaults: dict) -> Mapping[str, Mapping[str, Tuple[str, ...]]]:
    """Return a read-only copy of the parsed pod defaults."""
    return MappingProxyType(
        {
            selector: MappingProxyType(
                {field: tuple(values) for field, values in fields.items()}
            )
            for selector, fields in pod_defaults.items()
        }
    )


class ControllerConfig(NamedTuple):
    """Settings passed to the reconciler, built once at startup"""

    metrics_addr: str
    enable_leader_election: bool
    leader_election_namespace: str
    userid_header: str
    userid_prefix: str
    workload_identity: str
    pod_defaults: Mapping[str, Mapping[str, Tuple[str, ...]]]

    @classmethod
    def from_args(cls, args):
        return cls(
            metrics_addr=args.metrics_addr,
            enable_leader_election=args.enable_leader_election,
            leader_election_namespace=args.leader_election_namespace,
            userid_header=args.userid_header,
            userid_prefix=args.userid_prefix,
            workload_identity=args.workload_identity,
            pod_defaults=freeze_pod_defaults(args.pod_defaults or {}),
        )

    def selectors(self) -> List[str]:
        return list(self.pod_defaults)

    def labels(self, selector: str) -> List[str]:
        return list(self.pod_defaults.get(selector.lower(), {}).get("labels", ()))
