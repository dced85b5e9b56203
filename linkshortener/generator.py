"""Shortcode issuance

This module claims shortcodes in a key/value store, either the one a caller
asked for or a randomly generated one.

Random codes are drawn with `secrets` from an alphabet without look-alike
characters (0/O/o, 1/I/l). With the default 56-symbol alphabet and length 7
the code space holds ~2^40.6 values, so a collision retry is rare and
guessing live codes is impractical.

Classes:
    TokenGenerator:
        Claim caller-supplied or random shortcodes via KeyStoreBase.set_if_absent().

Example:
    >>> from datetime import timedelta
    >>> from linkshortener.store import InMemoryKeyStore
    >>> store = InMemoryKeyStore()
    >>> generator = TokenGenerator()
    >>> generator.issue(store, 'https://example.com', timedelta(hours=24))
    'Kp7fWq3'
    >>> generator.issue(store, 'https://example.com', timedelta(hours=24), custom_code='docs')
    'docs'
"""

import logging
import math
import secrets
from datetime import timedelta

from beartype import beartype

from linkshortener.constants import Shortcode
from linkshortener.exceptions import CodeTakenError, GenerationExhaustedError
from linkshortener.store.base import KeyStoreBase


logger = logging.getLogger(__name__)


class TokenGenerator:
    """Issue collision-checked shortcodes.

    Args:
        length (int):
            Length of randomly generated codes. Defaults to 7.
        alphabet (str):
            Symbols random codes are drawn from.
        max_attempts (int):
            Number of random codes tried before giving up. Defaults to 5.

    Raises:
        ValueError:
            If the alphabet has duplicate symbols, max_attempts < 1, or the
            alphabet/length pair yields less than 36 bits of entropy.
    """

    def __init__(
        self,
        length: int = Shortcode.LENGTH,
        alphabet: str = Shortcode.ALPHABET,
        max_attempts: int = Shortcode.MAX_ATTEMPTS,
    ):
        if len(set(alphabet)) != len(alphabet):
            raise ValueError(f'Alphabet must not contain duplicate symbols (given value: {alphabet!r}).')
        if max_attempts < 1:
            raise ValueError(f'max_attempts must be at least 1 (given value: {max_attempts}).')
        entropy = length * math.log2(len(alphabet)) if len(alphabet) > 1 else 0.0
        if entropy < Shortcode.MIN_ENTROPY_BITS:
            raise ValueError(
                f'Shortcodes of length {length} over {len(alphabet)} symbols carry {entropy:.1f} bits '
                f'of entropy (minimum: {Shortcode.MIN_ENTROPY_BITS}).'
            )

        self.length = length
        self.alphabet = alphabet
        self.max_attempts = max_attempts

    def generate(self) -> str:
        """Draw one random code (not claimed)"""
        return ''.join(secrets.choice(self.alphabet) for _ in range(self.length))

    @beartype
    def issue(self, store: KeyStoreBase, value: str, ttl: timedelta, custom_code: str | None = None) -> str:
        """Claim a shortcode for value in store and return it

        A custom code is attempted exactly once; there is no fallback to a
        random code when it is taken. Random codes are retried up to
        `max_attempts` times on collision.

        Args:
            store (KeyStoreBase):
                Store the record is written to.
            value (str):
                Value to map the shortcode to (the original URL).
            ttl (timedelta):
                Lifetime of the record.
            custom_code (str | None):
                Caller-chosen code. None or '' generates a random one.

        Returns:
            str: The claimed shortcode.

        Raises:
            CodeTakenError:
                If custom_code is already live.
            GenerationExhaustedError:
                If every random attempt collided with a live code.
            StoreUnavailableError:
                If the store can't be reached.
        """
        if custom_code:
            if not store.set_if_absent(store.keys.link_url_key(custom_code), value, ttl):
                raise CodeTakenError(f"Short code '{custom_code}' is already in use.")
            return custom_code

        for attempt in range(1, self.max_attempts + 1):
            code = self.generate()
            if store.set_if_absent(store.keys.link_url_key(code), value, ttl):
                return code
            logger.debug('Shortcode collision, retrying.', extra={'shortcode': code, 'attempt': attempt})

        raise GenerationExhaustedError(f'Could not find a free shortcode after {self.max_attempts} attempts.')
