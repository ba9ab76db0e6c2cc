#!/usr/bin/env python3
"""
OTA Management Script
Command-line client for the firmware catalog and rollout API.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

import requests

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


class OTAClientError(Exception):
    pass


class OTAManager:
    """Client for OTA admin operations."""

    def __init__(self, server_url: str, token: str, timeout: float = 60.0):
        """Initialize OTA manager.

        Args:
            server_url: Base URL of OTA server
            token: Bearer token carrying an admin access level
            timeout: Per-request timeout in seconds
        """
        self.server_url = server_url.rstrip('/')
        self.timeout = timeout
        self.headers = {'Authorization': f'Bearer {token}'}

    def _check(self, response: requests.Response, action: str, expected: int = 200) -> dict:
        if response.status_code != expected:
            raise OTAClientError(f"{action} failed ({response.status_code}): {response.text}")
        return response.json()

    def upload_firmware(
        self,
        binary_path: str,
        version: str,
        changelog: str = '',
        hardware_version: str = 'all',
        required: bool = False,
    ) -> dict:
        """Upload a firmware binary together with its metadata.

        Args:
            binary_path: Path to .bin file
            version: Version string (e.g., '1.0.0')
            changelog: Free-text release notes
            hardware_version: Hardware class tag, or 'all'
            required: Mark the update as mandatory

        Returns:
            The stored firmware record
        """
        file_path = Path(binary_path)
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {binary_path}")

        logger.info(f"Uploading {file_path.name} as v{version}...")

        with open(file_path, 'rb') as f:
            files = {'firmware': (file_path.name, f, 'application/octet-stream')}
            data = {
                'version': version,
                'changelog': changelog,
                'hardware_version': hardware_version,
                'required': 'true' if required else 'false',
            }
            response = requests.post(
                f"{self.server_url}/api/firmware/upload",
                files=files,
                data=data,
                headers=self.headers,
                timeout=self.timeout,
            )

        firmware = self._check(response, 'Upload', expected=201)['firmware']
        logger.info(f"✓ Uploaded v{firmware['version']}")
        logger.info(f"  File size: {firmware['size']} bytes")
        logger.info(f"  SHA256: {firmware['checksum']}")
        return firmware

    def list_firmware(self) -> list:
        response = requests.get(
            f"{self.server_url}/api/firmware/versions",
            headers=self.headers,
            timeout=self.timeout,
        )
        return self._check(response, 'List')['versions']

    def get_firmware(self, version: str) -> dict:
        response = requests.get(
            f"{self.server_url}/api/firmware/{version}",
            headers=self.headers,
            timeout=self.timeout,
        )
        return self._check(response, 'Get')

    def set_active(self, version: str, active: bool) -> dict:
        response = requests.patch(
            f"{self.server_url}/api/firmware/{version}",
            json={'active': active},
            headers=self.headers,
            timeout=self.timeout,
        )
        result = self._check(response, 'Update')
        logger.info(f"✓ v{version} is now {'active' if active else 'inactive'}")
        return result

    def delete_firmware(self, version: str) -> dict:
        response = requests.delete(
            f"{self.server_url}/api/firmware/{version}",
            headers=self.headers,
            timeout=self.timeout,
        )
        result = self._check(response, 'Delete')
        logger.info(f"✓ Deleted v{version}")
        return result

    def latest(self, hardware_version: Optional[str] = None, current_version: Optional[str] = None) -> dict:
        """Ask the server what a device would be offered (public endpoint)."""
        params = {}
        if hardware_version:
            params['hardware_version'] = hardware_version
        if current_version:
            params['current_version'] = current_version
        response = requests.get(
            f"{self.server_url}/api/firmware/latest",
            params=params,
            timeout=self.timeout,
        )
        return self._check(response, 'Latest')

    def trigger_rollout(
        self,
        target_version: str,
        device_serials: Optional[list[str]] = None,
        organization_id: Optional[str] = None,
        maintenance_window: Optional[str] = None,
    ) -> dict:
        """Trigger an OTA rollout.

        Args:
            target_version: Firmware version to push
            device_serials: Explicit device serials
            organization_id: Target every device in this organization instead
            maintenance_window: Scheduling hint passed through to devices

        Returns:
            Rollout summary
        """
        payload = {'target_version': target_version}
        if device_serials:
            payload['device_serials'] = device_serials
        if organization_id:
            payload['organization_id'] = organization_id
        if maintenance_window:
            payload['maintenance_window'] = maintenance_window

        response = requests.post(
            f"{self.server_url}/api/ota/trigger",
            json=payload,
            headers=self.headers,
            timeout=self.timeout,
        )
        result = self._check(response, 'Rollout')
        logger.info(f"✓ Rollout {result['rollout_id']} sent to {result['device_count']} device(s)")
        return result

    def get_rollout(self, rollout_id: str) -> dict:
        response = requests.get(
            f"{self.server_url}/api/ota/rollouts/{rollout_id}",
            headers=self.headers,
            timeout=self.timeout,
        )
        return self._check(response, 'Get rollout')

    def get_device_state(self, serial: str) -> dict:
        response = requests.get(
            f"{self.server_url}/api/ota/devices/{serial}",
            headers=self.headers,
            timeout=self.timeout,
        )
        return self._check(response, 'Get device state')


def main():
    parser = argparse.ArgumentParser(
        description='OTA Firmware Management Tool'
    )
    parser.add_argument(
        '--server',
        default='http://localhost:8000',
        help='OTA server URL (default: http://localhost:8000)'
    )
    parser.add_argument(
        '--token',
        required=True,
        help='Bearer token with admin access level'
    )

    subparsers = parser.add_subparsers(dest='command', help='Command to execute')

    upload_parser = subparsers.add_parser('upload', help='Upload firmware binary')
    upload_parser.add_argument('--file', required=True, help='Path to .bin file')
    upload_parser.add_argument('--version', required=True, help='Version (e.g., 1.0.0)')
    upload_parser.add_argument('--changelog', default='')
    upload_parser.add_argument('--hardware-version', default='all')
    upload_parser.add_argument('--required', action='store_true')

    subparsers.add_parser('list', help='List firmware versions')

    get_parser = subparsers.add_parser('get', help='Get firmware details')
    get_parser.add_argument('--version', required=True)

    activate_parser = subparsers.add_parser('activate', help='Make a version eligible for updates')
    activate_parser.add_argument('--version', required=True)

    deactivate_parser = subparsers.add_parser('deactivate', help='Withdraw a version from updates')
    deactivate_parser.add_argument('--version', required=True)

    delete_parser = subparsers.add_parser('delete', help='Delete firmware version')
    delete_parser.add_argument('--version', required=True)

    latest_parser = subparsers.add_parser('latest', help='Show the firmware a device would get')
    latest_parser.add_argument('--hardware-version')
    latest_parser.add_argument('--current-version')

    rollout_parser = subparsers.add_parser('rollout', help='Trigger OTA rollout')
    rollout_parser.add_argument('--version', required=True)
    target = rollout_parser.add_mutually_exclusive_group(required=True)
    target.add_argument('--devices', nargs='+', help='Device serials')
    target.add_argument('--organization', help='Organization id')
    rollout_parser.add_argument('--maintenance-window')

    rollout_get_parser = subparsers.add_parser('rollout-status', help='Show a rollout record')
    rollout_get_parser.add_argument('--id', required=True)

    device_parser = subparsers.add_parser('device', help='Show OTA state of a device')
    device_parser.add_argument('--serial', required=True)

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 1

    try:
        manager = OTAManager(args.server, args.token)

        if args.command == 'upload':
            result = manager.upload_firmware(
                args.file,
                args.version,
                changelog=args.changelog,
                hardware_version=args.hardware_version,
                required=args.required,
            )
        elif args.command == 'list':
            result = manager.list_firmware()
        elif args.command == 'get':
            result = manager.get_firmware(args.version)
        elif args.command == 'activate':
            result = manager.set_active(args.version, True)
        elif args.command == 'deactivate':
            result = manager.set_active(args.version, False)
        elif args.command == 'delete':
            result = manager.delete_firmware(args.version)
        elif args.command == 'latest':
            result = manager.latest(args.hardware_version, args.current_version)
        elif args.command == 'rollout':
            result = manager.trigger_rollout(
                args.version,
                device_serials=args.devices,
                organization_id=args.organization,
                maintenance_window=args.maintenance_window,
            )
        elif args.command == 'rollout-status':
            result = manager.get_rollout(args.id)
        else:
            result = manager.get_device_state(args.serial)

        print(json.dumps(result, indent=2, default=str))
        return 0

    except (OTAClientError, OSError, requests.RequestException) as e:
        logger.error(f"Error: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
