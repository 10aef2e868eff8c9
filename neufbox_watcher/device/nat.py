"""NAT (port forwarding) rule model and its form encoding."""

import ipaddress
from dataclasses import dataclass

from ..errors import ValidationError, ValidationErrorKind, logged

PROTOCOLS = ("tcp", "udp", "both")

Ports = int | tuple[int, int]


def _is_range(ports: Ports) -> bool:
    return isinstance(ports, (tuple, list))


def _format_ports(ports: Ports) -> str:
    if _is_range(ports):
        return f"{ports[0]}-{ports[1]}"
    return str(ports)


def _port_numbers(ports: Ports) -> list[int] | None:
    """Ports as integers, or None when one is not a valid TCP/UDP port."""
    values = ports if _is_range(ports) else (ports,)
    try:
        numbers = [int(p) for p in values]
    except (TypeError, ValueError):
        return None
    if not all(1 <= p <= 65535 for p in numbers):
        return None
    return numbers


def parse_ipv4(address: str) -> list[str]:
    """Return the four octets of *address* or raise ``INVALID_IP``."""
    parts = address.split(".")
    try:
        ipaddress.IPv4Address(address)
    except ValueError:
        parts = []
    if len(parts) != 4:
        raise logged(ValidationError(
            f"Cannot add NAT rule, invalid IP: {address}",
            ValidationErrorKind.INVALID_IP,
        ))
    return parts


@dataclass(frozen=True)
class NatRule:
    """
    One port-forwarding rule.

    ``external_ports`` and ``target_ports`` are either a single port or a
    ``(low, high)`` range; both must use the same form, and ranges must
    have the same span.
    """

    name: str
    protocol: str
    external_ports: Ports
    target_ip: str
    target_ports: Ports
    active: bool = True

    @property
    def is_range(self) -> bool:
        return _is_range(self.external_ports)

    def summary(self) -> str:
        proto = "tcp-udp" if self.protocol == "both" else self.protocol
        return (
            f"{self.name} ({proto}) {_format_ports(self.external_ports)} => "
            f"{self.target_ip}:{_format_ports(self.target_ports)} "
            f"{'ACTIVE' if self.active else 'INACTIVE'}"
        )

    def validate(self) -> list[str]:
        """Check the rule; returns the target IP octets when valid."""
        if self.protocol not in PROTOCOLS:
            raise logged(ValidationError(
                f"Cannot add NAT rule, unknown protocol {self.protocol!r} "
                f"(expected one of {', '.join(PROTOCOLS)})",
                ValidationErrorKind.INVALID_PROTOCOL,
            ))

        octets = parse_ipv4(self.target_ip)

        if _is_range(self.external_ports) != _is_range(self.target_ports):
            raise logged(ValidationError(
                "Cannot add NAT rule, external and target ports must both be "
                "single ports or both be ranges: " + self.summary(),
                ValidationErrorKind.INVALID_PORTS,
            ))
        if self.is_range:
            if len(self.external_ports) != 2 or len(self.target_ports) != 2:
                raise logged(ValidationError(
                    "Cannot add NAT rule, a port range needs exactly two bounds: "
                    f"{self.external_ports!r} => {self.target_ports!r}",
                    ValidationErrorKind.INVALID_PORTS,
                ))

        external = _port_numbers(self.external_ports)
        target = _port_numbers(self.target_ports)
        if external is None or target is None:
            raise logged(ValidationError(
                "Cannot add NAT rule, ports must be numbers between 1 and 65535: "
                f"{self.external_ports!r} => {self.target_ports!r}",
                ValidationErrorKind.INVALID_PORTS,
            ))
        if self.is_range:
            ext_low, ext_high = external
            dst_low, dst_high = target
            if dst_high - dst_low != ext_high - ext_low:
                raise logged(ValidationError(
                    "Cannot add NAT rule, ranges do not match: " + self.summary(),
                    ValidationErrorKind.RANGE_MISMATCH,
                ))
        return octets

    def form_fields(self) -> dict[str, str]:
        """Form fields the NAT page expects for a new rule."""
        octets = self.validate()
        ranged = self.is_range
        return {
            "nat_rulename": self.name,
            "nat_proto": self.protocol,
            "nat_range": "true" if ranged else "false",
            "nat_extport": "" if ranged else str(self.external_ports),
            "nat_extrange_p0": str(self.external_ports[0]) if ranged else "",
            "nat_extrange_p1": str(self.external_ports[1]) if ranged else "",
            "nat_dstip_p0": octets[0],
            "nat_dstip_p1": octets[1],
            "nat_dstip_p2": octets[2],
            "nat_dstip_p3": octets[3],
            "nat_dstport": "" if ranged else str(self.target_ports),
            "nat_dstrange_p0": str(self.target_ports[0]) if ranged else "",
            "nat_dstrange_p1": str(self.target_ports[1]) if ranged else "",
            "nat_active": "on" if self.active else "",
        }
