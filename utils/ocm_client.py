"""Cluster lookups against OCM through the `ocm` CLI"""

import json
import re
import subprocess
from typing import List, Optional

from models.cluster import ClusterRecord
from utils.errors import ResourceLookupError

CLUSTERS_API = '/api/clusters_mgmt/v1/clusters'
INTERNAL_ID_PATTERN = re.compile(r'^[a-z0-9]{32}$')


class OCMClient:
    """Read-only access to clusters_mgmt using an already logged-in `ocm` CLI"""

    def __init__(self, ocm_binary: str = 'ocm', debug: bool = False):
        self.ocm_binary = ocm_binary
        self.debug = debug

    def get_cluster(self, identifier: str) -> ClusterRecord:
        """
        Fetch a cluster record.

        Internal IDs are fetched directly. Anything else is treated as an
        external ID or cluster name and resolved with a search, which must
        match exactly one cluster.

        Raises:
            ResourceLookupError: unknown cluster, ambiguous identifier, or OCM unreachable
        """
        if INTERNAL_ID_PATTERN.match(identifier):
            data = self._get([f'{CLUSTERS_API}/{identifier}'])
            return ClusterRecord(data)

        # OCM search strings quote values SQL style
        quoted = identifier.replace("'", "''")
        search = f"id = '{quoted}' or external_id = '{quoted}' or name = '{quoted}'"
        data = self._get([CLUSTERS_API, '--parameter', f'search={search}'])
        items = data.get('items') or []

        if not items:
            raise ResourceLookupError(f"No cluster found matching '{identifier}'")
        if len(items) > 1:
            ids = ', '.join(item.get('id', '?') for item in items)
            raise ResourceLookupError(
                f"Identifier '{identifier}' matches {len(items)} clusters ({ids}), use the internal cluster ID"
            )
        return ClusterRecord(items[0])

    def _get(self, args: List[str]) -> dict:
        cmd = [self.ocm_binary, 'get'] + args
        if self.debug:
            print(' '.join(cmd))

        try:
            result = subprocess.run(cmd, capture_output=True, text=True)
        except FileNotFoundError as e:
            raise ResourceLookupError(
                f"'{self.ocm_binary}' command not found. Install the ocm CLI and run 'ocm login'"
            ) from e

        if result.returncode != 0:
            raise ResourceLookupError(
                f"Failed to get cluster from ocm: {self._error_detail(result.stderr)}"
            )

        try:
            return json.loads(result.stdout)
        except json.JSONDecodeError as e:
            raise ResourceLookupError(f"Unexpected response from ocm: {e}") from e

    @staticmethod
    def _error_detail(stderr: Optional[str]) -> str:
        stderr = (stderr or '').strip()
        return stderr or 'no error output from ocm'
