"""Enumerate nearby MAC addresses (ARP table, WiFi, Bluetooth) via platform tools.

These helpers only produce candidate MACs for the lookup service.  Each
``parse_*`` function turns one tool's text output into a list of dicts with
at least a ``mac`` key; each ``scan_*`` function runs the tool and returns
an empty list when it is missing or fails.
"""

import logging
import platform
import re
import subprocess
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

_CMD_TIMEOUT = 30

_OCTET = r"[0-9A-Fa-f]{2}"
_ARP_UNIX = re.compile(
    r"\((\d+\.\d+\.\d+\.\d+)\)\s+at\s+(" + ":".join([_OCTET] * 6) + r")"
)
_ARP_WINDOWS = re.compile(
    r"^\s+(\d+\.\d+\.\d+\.\d+)\s+(" + "-".join([_OCTET] * 6) + r")\s+(\w+)"
)
_BROADCAST = {"ff:ff:ff:ff:ff:ff", "ff-ff-ff-ff-ff-ff"}

_BT_DEVICE = re.compile(r"Device\s+([0-9A-Fa-f:]{17})\s+(.+)")
_AIRPORT_LINE = re.compile(r"^(.*?)\s+([0-9a-f]{2}(?::[0-9a-f]{2}){5})\s+(-?\d+)\s+(\d+)", re.I)
_NETSH_SSID = re.compile(r"^SSID\s*\d*\s*:\s*(.*)")
_NETSH_BSSID = re.compile(r"^BSSID\s*\d*\s*:\s*([0-9a-fA-F:]+)")
_NETSH_SIGNAL = re.compile(r"^Signal\s*:\s*(\d+)%")
_NETSH_CHANNEL = re.compile(r"^Channel\s*:\s*(\d+)")

_AIRPORT = ("/System/Library/PrivateFrameworks/Apple80211.framework/"
            "Versions/Current/Resources/airport")


def _run(cmd: List[str]) -> Optional[str]:
    """Run a command and return stdout, or None if it is missing or fails."""
    try:
        r = subprocess.run(cmd, capture_output=True, text=True, timeout=_CMD_TIMEOUT)
    except (OSError, subprocess.SubprocessError) as e:
        logger.debug("%s failed: %s", cmd[0], e)
        return None
    if r.returncode != 0:
        logger.debug("%s exited with %d", cmd[0], r.returncode)
        return None
    return r.stdout


# ---------------------------------------------------------------------------
# ARP
# ---------------------------------------------------------------------------

def parse_arp_output(text: str, windows: bool = False) -> List[Dict[str, str]]:
    """Parse ``arp -a`` output; broadcast entries are dropped."""
    entries = []
    for line in (text or "").splitlines():
        m = (_ARP_WINDOWS if windows else _ARP_UNIX).search(line)
        if not m:
            continue
        ip, mac = m.group(1), m.group(2)
        if mac.lower() in _BROADCAST:
            continue
        entry = {"ip": ip, "mac": mac}
        if windows:
            entry["type"] = m.group(3)
        entries.append(entry)
    return entries


def scan_arp() -> List[Dict[str, str]]:
    out = _run(["arp", "-a"])
    return parse_arp_output(out, windows=platform.system() == "Windows")


# ---------------------------------------------------------------------------
# WiFi
# ---------------------------------------------------------------------------

def _split_nmcli(line: str) -> List[str]:
    """Split an ``nmcli -t`` line on unescaped colons."""
    fields, buf, escaped = [], [], False
    for ch in line:
        if escaped:
            buf.append(ch)
            escaped = False
        elif ch == "\\":
            escaped = True
        elif ch == ":":
            fields.append("".join(buf))
            buf = []
        else:
            buf.append(ch)
    fields.append("".join(buf))
    return fields


def parse_nmcli_output(text: str) -> List[Dict[str, str]]:
    """Parse ``nmcli -t -f BSSID,SSID,SIGNAL,CHAN dev wifi list``."""
    networks = []
    for line in (text or "").splitlines():
        fields = _split_nmcli(line.strip())
        if len(fields) < 4 or not re.fullmatch(":".join([_OCTET] * 6), fields[0]):
            continue
        networks.append({
            "mac": fields[0],
            "ssid": fields[1] or "(Hidden)",
            "signal": f"{fields[2]}%" if fields[2] else "",
            "channel": fields[3],
        })
    return networks


def parse_airport_output(text: str) -> List[Dict[str, str]]:
    """Parse macOS ``airport -s`` output (header line skipped)."""
    networks = []
    for line in (text or "").splitlines()[1:]:
        m = _AIRPORT_LINE.match(line.strip())
        if m:
            networks.append({
                "mac": m.group(2),
                "ssid": m.group(1).strip() or "(Hidden)",
                "signal": f"{m.group(3)} dBm",
                "channel": m.group(4),
            })
    return networks


def parse_netsh_output(text: str) -> List[Dict[str, str]]:
    """Parse Windows ``netsh wlan show networks mode=bssid``."""
    networks: List[Dict[str, str]] = []
    ssid = ""
    current: Optional[Dict[str, str]] = None
    for line in (text or "").splitlines():
        line = line.strip()
        m = _NETSH_SSID.match(line)
        if m:
            ssid = m.group(1).strip()
            continue
        m = _NETSH_BSSID.match(line)
        if m:
            current = {"mac": m.group(1), "ssid": ssid or "(Hidden)",
                       "signal": "", "channel": ""}
            networks.append(current)
            continue
        if current is None:
            continue
        m = _NETSH_SIGNAL.match(line)
        if m:
            current["signal"] = f"{m.group(1)}%"
        m = _NETSH_CHANNEL.match(line)
        if m:
            current["channel"] = m.group(1)
    return networks


def scan_wifi() -> List[Dict[str, str]]:
    system = platform.system()
    if system == "Windows":
        return parse_netsh_output(_run(["netsh", "wlan", "show", "networks", "mode=bssid"]))
    if system == "Darwin":
        return parse_airport_output(_run([_AIRPORT, "-s"]))
    _run(["nmcli", "dev", "wifi", "rescan"])
    return parse_nmcli_output(
        _run(["nmcli", "-t", "-f", "BSSID,SSID,SIGNAL,CHAN", "dev", "wifi", "list"]))


# ---------------------------------------------------------------------------
# Bluetooth
# ---------------------------------------------------------------------------

def parse_bluetoothctl_output(text: str) -> List[Dict[str, str]]:
    """Parse ``bluetoothctl devices`` output."""
    devices = []
    for line in (text or "").splitlines():
        m = _BT_DEVICE.search(line)
        if m:
            devices.append({"mac": m.group(1), "name": m.group(2).strip()})
    return devices


def scan_bluetooth() -> List[Dict[str, str]]:
    """List known Bluetooth peers (Linux ``bluetoothctl`` only)."""
    if platform.system() != "Linux":
        logger.warning("bluetooth enumeration is only supported on Linux")
        return []
    return parse_bluetoothctl_output(_run(["bluetoothctl", "devices"]))
