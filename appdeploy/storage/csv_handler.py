"""
CSV deployment history.
"""

import csv
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from loguru import logger

from appdeploy.deploy.models import DeviceRecord


class CSVHandler:
    """Append and read deployment history rows."""

    def __init__(self, csv_file: Path):
        """
        Initialize CSV handler.

        Args:
            csv_file: Path to CSV file
        """
        self.csv_file = csv_file
        self.fieldnames = [
            'timestamp',
            'operation',
            'device',
            'ip',
            'package',
            'status',
            'details',
        ]

        if not csv_file.exists():
            self._create_csv()

    def _create_csv(self):
        """Create CSV file with headers."""
        self.csv_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self.csv_file, 'w', newline='') as f:
            writer = csv.DictWriter(f, fieldnames=self.fieldnames)
            writer.writeheader()

        logger.debug(f"Created CSV file: {self.csv_file}")

    def write_result(
        self,
        operation: str,
        device: DeviceRecord,
        package: str,
        status: str,
        details: str = "",
        timestamp: Optional[datetime] = None,
    ):
        """
        Write one deployment attempt to CSV.

        Args:
            operation: install, update or uninstall
            device: Target device
            package: Package path or package identifier
            status: success or failure
            details: Error message or other notes
            timestamp: When the attempt started (default: now)
        """
        row = {
            'timestamp': (timestamp or datetime.now()).isoformat(),
            'operation': operation,
            'device': device.name,
            'ip': device.ip,
            'package': package,
            'status': status,
            'details': details,
        }

        with open(self.csv_file, 'a', newline='') as f:
            writer = csv.DictWriter(f, fieldnames=self.fieldnames)
            writer.writerow(row)

        logger.debug(f"Recorded {operation} of {package} on {device.name}: {status}")

    def read_results(self) -> List[Dict[str, str]]:
        """
        Read all rows from CSV, oldest first.

        Returns:
            List of row dictionaries
        """
        if not self.csv_file.exists():
            return []

        with open(self.csv_file, 'r', newline='') as f:
            return list(csv.DictReader(f))
