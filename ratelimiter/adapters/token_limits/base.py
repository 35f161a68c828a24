from abc import ABC, abstractmethod


class AbstractTokenLimitResolver(ABC):
    """Interface for token budget lookups."""

    @abstractmethod
    def limit_for(self, token: str) -> int:
        """Return the request budget granted to ``token``.

        Args:
            token: Opaque client-supplied token (may be empty).

        Returns:
            int: Override budget, or 0 when the token grants no override.
        """
        ...
