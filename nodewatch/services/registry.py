"""Registry Checker — is this node listed by the network's node manager?

Presence policy: the identifier must appear case-sensitively and must not
be flanked by hostname characters, so ``node.example.com`` is found in
``"https://node.example.com/"`` but not in ``xnode.example.com`` or
``node.example.com.evil``.
"""

import logging
import re

from nodewatch.models import RegistryStatus
from nodewatch.services import fetcher

log = logging.getLogger(__name__)

_HOST_CHARS = r"A-Za-z0-9.\-"


def identifier_pattern(node_identifier):
    """Compile the bounded-match regex for *node_identifier*."""
    return re.compile(
        rf"(?<![{_HOST_CHARS}]){re.escape(node_identifier)}(?![{_HOST_CHARS}])"
    )


def contains_identifier(body, node_identifier):
    if not node_identifier:
        return False
    return identifier_pattern(node_identifier).search(body) is not None


def check_registry(registry_url, node_identifier,
                   timeout=fetcher.DEFAULT_TIMEOUT, fetch=None):
    """Query the node listing once and classify the response.

    Args:
        registry_url:    Full URL of the ``/nodes`` listing.
        node_identifier: This node's host name as the registry lists it.

    Returns:
        RegistryStatus.  ``present`` is None when the status is not 2xx.

    Raises:
        TransportError: if the registry cannot be reached at all.
    """
    fetch = fetch or fetcher.fetch
    result = fetch(registry_url, timeout=timeout)
    if not result.ok:
        return RegistryStatus(status_code=result.status_code)

    return RegistryStatus(
        status_code=result.status_code,
        present=contains_identifier(result.body, node_identifier),
    )
