"""Short code generation utilities."""

import logging
import random
import string
import time
from typing import Awaitable, Callable, List, Optional, Tuple


ExistsCheck = Callable[[str], Awaitable[bool]]


class ShortCodeGenerator:
    """Generate and validate short codes for URLs."""

    # Base62 characters (alphanumeric, case-sensitive)
    BASE62_CHARS = string.ascii_lowercase + string.ascii_uppercase + string.digits
    BASE36_CHARS = string.digits + string.ascii_lowercase

    MIN_LENGTH = 3
    MAX_LENGTH = 20
    RESERVED_WORDS = frozenset({"api", "admin", "www", "shorturls", "stats", "health"})

    def __init__(
        self,
        default_length: int = 6,
        rng: Optional[random.Random] = None,
        clock_ms: Optional[Callable[[], int]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize short code generator.

        Args:
            default_length: Default length for generated codes
            rng: Optional random source (seeded in tests)
            clock_ms: Optional epoch-milliseconds clock for the timestamp fallback
            logger: Optional logger
        """
        self.default_length = default_length
        self.rng = rng or random.Random()
        self.clock_ms = clock_ms or (lambda: int(time.time() * 1000))
        self.logger = logger or logging.getLogger(__name__)

    def generate_random(self, length: Optional[int] = None) -> str:
        """Generate a random short code.

        Args:
            length: Length of the code (uses default if not specified)

        Returns:
            Random short code
        """
        length = length or self.default_length
        return ''.join(self.rng.choices(self.BASE62_CHARS, k=length))

    def generate_from_timestamp(self) -> str:
        """Generate a short code from the current time.

        Base36 of the epoch milliseconds followed by 3 random base36 characters.

        Returns:
            Timestamp-derived short code
        """
        stamp = self._int_to_base36(self.clock_ms())
        suffix = ''.join(self.rng.choices(self.BASE36_CHARS, k=3))
        return stamp + suffix

    async def generate_unique(self, exists_check: ExistsCheck, max_attempts: int = 10) -> str:
        """Generate a short code that the store does not hold yet.

        Tries ``max_attempts`` codes of the default length, then one code two
        characters longer, then falls back to a timestamp-derived code that is
        returned without an existence check.

        Args:
            exists_check: Async callable reporting whether a code is taken
            max_attempts: Attempts at the default length

        Returns:
            Short code
        """
        for attempt in range(max_attempts):
            code = self.generate_random()
            if not await exists_check(code):
                self.logger.debug(f"Unique short code {code} after {attempt + 1} attempt(s)")
                return code
            self.logger.debug(f"Short code collision: {code} (attempt {attempt + 1})")

        code = self.generate_random(self.default_length + 2)
        if not await exists_check(code):
            self.logger.warning(f"Using longer short code after {max_attempts} collisions: {code}")
            return code

        # NOTE: returned without an existence check, so it can collide
        code = self.generate_from_timestamp()
        self.logger.warning(f"Using timestamp short code: {code}")
        return code

    def validate_custom(self, short_code) -> Tuple[bool, List[str]]:
        """Validate a caller-supplied short code.

        All violated rules are reported, not just the first.

        Args:
            short_code: Candidate code

        Returns:
            Tuple of (is_valid, errors)
        """
        if not short_code or not isinstance(short_code, str):
            return False, ["Shortcode must be a non-empty string"]

        errors = []
        if len(short_code) < self.MIN_LENGTH:
            errors.append(f"Shortcode must be at least {self.MIN_LENGTH} characters long")
        if len(short_code) > self.MAX_LENGTH:
            errors.append(f"Shortcode must be at most {self.MAX_LENGTH} characters long")
        if not self.is_valid_format(short_code):
            errors.append("Shortcode must contain only alphanumeric characters")
        if short_code.lower() in self.RESERVED_WORDS:
            errors.append("Shortcode cannot be a reserved word")

        if errors:
            self.logger.warning(f"Invalid shortcode '{short_code}': {', '.join(errors)}")
        return not errors, errors

    @staticmethod
    def normalize(short_code) -> Optional[str]:
        """Strip surrounding whitespace; None for empty or non-string input."""
        if not short_code or not isinstance(short_code, str):
            return None
        return short_code.strip() or None

    @classmethod
    def _int_to_base36(cls, num: int) -> str:
        """Convert a non-negative integer to a base36 string."""
        if num == 0:
            return cls.BASE36_CHARS[0]

        result = []
        base = len(cls.BASE36_CHARS)
        while num > 0:
            num, remainder = divmod(num, base)
            result.append(cls.BASE36_CHARS[remainder])

        return ''.join(reversed(result))

    @staticmethod
    def is_valid_format(code: str) -> bool:
        """Check if code is strictly alphanumeric (ASCII).

        Args:
            code: Code to validate

        Returns:
            True if valid format
        """
        return bool(code) and all(c in ShortCodeGenerator.BASE62_CHARS for c in code)
