"""
Merkle Tree Hash Calculator.

SHA-256 over hex-encoded input, producing hex-encoded digests.
Requires Python 3.11+.
"""

import binascii
import hashlib

from merkle.errors import InvalidEncodingError

DIGEST_HEX_LENGTH = 64


def merkle_hash(data: str) -> str:
    """
    Hash hex-encoded bytes with SHA-256.

    Decoding is strict: odd length, whitespace and non-hex characters are
    all rejected.

    Args:
        data: Hex string (either case)

    Returns:
        Lower-case hex SHA-256 digest

    Raises:
        InvalidEncodingError: If ``data`` is not valid hexadecimal
    """
    try:
        raw = binascii.unhexlify(data)
    except (ValueError, TypeError) as exc:
        raise InvalidEncodingError(data) from exc
    return hashlib.sha256(raw).hexdigest()


class HashCalculator:
    """
    Combines node hashes for the tree.

    Parents are the SHA-256 of the decoded bytes of ``left`` followed by the
    decoded bytes of ``right``.
    """

    def hash(self, data: str) -> str:
        """Hash a single hex string."""
        return merkle_hash(data)

    def combine(self, left: str, right: str) -> str:
        """
        Hash two child digests into their parent digest.

        Args:
            left: Hex digest placed first
            right: Hex digest placed second

        Returns:
            Parent digest as hex string
        """
        return merkle_hash(left + right)

    def combine_step(self, current: str, sibling: str, is_left: bool) -> str:
        """Combine a running hash with a sibling following a proof direction."""
        if is_left:
            return self.combine(sibling, current)
        return self.combine(current, sibling)
