"""Verifies the ``X-Hub-Signature`` header of push notifications."""

__all__ = ["parse_signature_header", "verify_signature"]

import hmac

from ytwebsub.errors import UnsupportedAlgorithmError


def parse_signature_header(header: str) -> tuple[str, str]:
    """Split an ``X-Hub-Signature`` header into the algorithm and the signature.

    The algorithm is everything before the first ``=`` and the signature is
    everything after the last ``=``, both lower-cased.

    :param header: The value of the header, such as ``sha1=0a1b...``.
    :return: The algorithm name and the hex signature.
    """
    algorithm, _, rest = header.partition("=")
    signature = rest.rpartition("=")[2]

    return algorithm.lower(), signature.lower()


def verify_signature(secret: str, algorithm: str, signature: str, body: bytes) -> bool:
    """Check whether the body was signed with the secret.

    :param secret: The secret shared with the hub.
    :param algorithm: The name of the hash algorithm, such as ``sha1``.
    :param signature: The hex signature sent by the hub.
    :param body: The raw request body.
    :return: True if the signature matches, False otherwise.
    :raises UnsupportedAlgorithmError: If the algorithm cannot be used for HMAC.
    """
    try:
        mac = hmac.new(secret.encode(), body, algorithm)
    except (ValueError, TypeError) as ex:
        raise UnsupportedAlgorithmError(algorithm) from ex

    # Extendable-output functions such as shake_128 have no fixed digest
    if mac.digest_size == 0:
        raise UnsupportedAlgorithmError(algorithm)

    return hmac.compare_digest(mac.hexdigest().encode(), signature.lower().encode())
