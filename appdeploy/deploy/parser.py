"""
Parse the device listing printed by ``WinAppDeployCmd devices``.
"""

import re
from typing import List, Optional

from appdeploy.deploy.models import DeviceRecord

# 127.0.0.1   00000015-b21e-0da9-0000-000000000000    Lumia 1520 (RM-940)
#   -> ip, guid, name
DEVICE_LINE_PATTERN = re.compile(r'^([\d.]+?)\s+([\da-fA-F-]+?)\s+(.+)$', re.ASCII)

LINE_BREAK = re.compile(r'\r\n|\r|\n')


def parse_device_line(line: str, index: int) -> Optional[DeviceRecord]:
    """
    Parse a single line of device listing output.

    Args:
        line: One line of tool output, without its line terminator
        index: Index to assign if the line describes a device

    Returns:
        DeviceRecord, or None if the line is a header, blank or otherwise
        not a device row
    """
    match = DEVICE_LINE_PATTERN.match(line)
    if not match:
        return None

    ip, guid, name = match.groups()
    return DeviceRecord(index=index, name=name, type="device", ip=ip, guid=guid)


def parse_devices_output(output: str) -> List[DeviceRecord]:
    """
    Parse the full output of ``WinAppDeployCmd devices``.

    Devices keep the order in which the tool printed them. Indexes count
    matched lines only, so they are dense from 0.
    """
    devices: List[DeviceRecord] = []

    for line in LINE_BREAK.split(output):
        device = parse_device_line(line, len(devices))
        if device is not None:
            devices.append(device)

    return devices
