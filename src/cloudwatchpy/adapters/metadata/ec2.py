"""EC2 instance metadata adapter.

Looks up the id of the running instance from the EC2 instance metadata
service, using an IMDSv2 session token.
"""

import httpx

from cloudwatchpy.core.dimensions import InstanceIdAdder
from cloudwatchpy.core.metrics import ALL
from cloudwatchpy.core.ports import MetricFilter

METADATA_URL = "http://169.254.169.254/latest"
TOKEN_TTL_HEADER = "X-aws-ec2-metadata-token-ttl-seconds"
TOKEN_HEADER = "X-aws-ec2-metadata-token"


class EC2MetadataSource:
    """MetadataSourcePort implementation for the EC2 metadata service.

    Only works inside EC2; elsewhere ``lookup()`` raises.

    Args:
        base_url: Metadata service root.
        timeout: Seconds to wait for each request.
        client: HTTP client to use instead of a new one per lookup.
    """

    def __init__(
        self,
        base_url: str = METADATA_URL,
        timeout: float = 1.0,
        client: httpx.Client | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._client = client

    def lookup(self) -> str:
        """Return the instance id.

        Raises:
            httpx.HTTPError: If the service is unreachable or answers non-2xx.
            ValueError: If the service returns an empty id.
        """
        if self._client is not None:
            return self._fetch(self._client)
        with httpx.Client(timeout=self._timeout) as client:
            return self._fetch(client)

    def _fetch(self, client: httpx.Client) -> str:
        token_response = client.put(
            f"{self._base_url}/api/token", headers={TOKEN_TTL_HEADER: "60"}
        )
        token_response.raise_for_status()
        response = client.get(
            f"{self._base_url}/meta-data/instance-id",
            headers={TOKEN_HEADER: token_response.text},
        )
        response.raise_for_status()
        instance_id = response.text.strip()
        if not instance_id:
            raise ValueError("EC2 metadata service returned an empty instance id")
        return instance_id


def ec2_instance_id_adder(predicate: MetricFilter = ALL) -> InstanceIdAdder:
    """Return an adder tagging metrics with the EC2 instance id.

    Outside EC2, or if the metadata service fails, the dimension value is
    ``unknown``.
    """
    return InstanceIdAdder(metadata_source=EC2MetadataSource(), predicate=predicate)
