import base64
import json
import logging
from dataclasses import replace

import bcrypt

from .errors import TokenDerivationError
from .models import Domain, Frozen, Token

logger = logging.getLogger(__name__)

# bcrypt.MinCost
MIN_ROUNDS = 4


def label_from_key(key: str) -> str:
    """Return the record segment of an etcd key, e.g. ``/rdns/_frozen/a_b`` -> ``a_b``."""
    segments = [s for s in key.split("/") if s]
    if not segments:
        raise ValueError(f"Invalid etcd key: {key!r}")
    return segments[-1]


def domain_from_key(key: str) -> str:
    """``/token_origin/foo_bar_com`` -> ``foo.bar.com``"""
    return ".".join(label_from_key(key).split("_"))


def generate_token(secret: str) -> str:
    """
    Derive a bearer token for the legacy API from a stored token secret.

    The hash is salted, so two calls for the same secret never return the
    same value. Callers must derive a fresh one per request.
    """
    try:
        hashed = bcrypt.hashpw(secret.encode("utf-8"), bcrypt.gensalt(rounds=MIN_ROUNDS))
    except (TypeError, ValueError) as e:
        logger.error("Failed to generate token: %s", e)
        raise TokenDerivationError(f"failed to generate token: {e}") from e
    return base64.b64encode(hashed).decode("ascii")


def unwrap_acme_text(text: str) -> str:
    """Return the ``text`` value of a JSON-wrapped TXT payload, or the raw text."""
    try:
        value = json.loads(text)
    except (TypeError, ValueError):
        return text
    if not isinstance(value, dict):
        return text
    inner = value.get("text")
    return inner if isinstance(inner, str) else ""


class Transformer:
    """Rewrites source records into their destination form."""

    def __init__(self, src_domain: str, dst_domain: str) -> None:
        self.src_domain = src_domain
        self.dst_domain = dst_domain

    @property
    def rewrites(self) -> bool:
        return self.src_domain != self.dst_domain

    def frozen_payload(self, frozen: Frozen) -> Frozen:
        return replace(frozen, path=label_from_key(frozen.path))

    def token_payload(self, token: Token) -> Token:
        if not self.rewrites:
            return token
        first = domain_from_key(token.path).split(".")[0]
        return replace(token, path=f"{first}.{self.dst_domain}")

    def record_payload(self, domain: Domain) -> Domain:
        if not self.rewrites:
            return domain
        labels = domain.fqdn.split(".")
        if domain.has_text:
            if len(labels) < 2:
                raise ValueError(f"Cannot rewrite TXT fqdn {domain.fqdn!r}")
            fqdn = f"{labels[0]}.{labels[1]}.{self.dst_domain}"
        else:
            fqdn = f"{labels[0]}.{self.dst_domain}"
        return replace(domain, fqdn=fqdn)
