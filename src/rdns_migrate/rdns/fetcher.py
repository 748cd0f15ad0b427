import logging

from ..errors import TransportError
from ..models import Domain, Token
from ..transformer import domain_from_key, generate_token
from ..utils import get_endpoint
from .client import RDNSClient, wrap_error

logger = logging.getLogger(__name__)


class LegacyFetcher:
    """
    Reads A and ACME TXT records from the 0.4.x API.

    Every query authenticates with a bearer token derived from the subdomain's
    stored secret.
    """

    def __init__(self, client: RDNSClient) -> None:
        self._client = client

    def query_a_record(self, token: Token) -> Domain:
        fqdn = domain_from_key(token.path)
        return self._query("query_a_record", get_endpoint("domain", fqdn=fqdn), token)

    def query_txt_record(self, token: Token) -> Domain:
        fqdn = domain_from_key(token.path)
        # only the acme challenge record is migrated
        return self._query("query_txt_record", get_endpoint("acme_txt", fqdn=fqdn), token)

    def _query(self, op: str, endpoint: str, token: Token) -> Domain:
        bearer = generate_token(token.token)
        logger.debug("%s: GET %s", op, endpoint)
        try:
            resp = self._client.get(endpoint, bearer=bearer)
        except TransportError as e:
            raise wrap_error(op, e) from e
        return resp.data
