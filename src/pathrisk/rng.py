"""Deterministic per-path random streams.

Every simulated path owns its own generator, seeded from the request's base
seed and the path index.  No generator is ever shared between paths, so the
ensemble is identical whichever order (or process) the paths run in.
"""

import numpy as np

SEED_MODULUS = 2**64


def derive_seed(base: int, index: int, antithetic: bool = False) -> int:
    """Return the seed for path ``index``.

    Antithetic pairs ``(2k, 2k+1)`` share the seed ``base + k``.
    """
    offset = index // 2 if antithetic else index
    return (int(base) + offset) % SEED_MODULUS


class RandomStream:
    """Seeded PCG64 stream with optional antithetic mirroring.

    With ``antithetic=True`` every standard-normal draw is negated; uniform
    and Poisson draws are left untouched.
    """

    def __init__(self, seed: int, antithetic: bool = False):
        self.seed = seed
        self.antithetic = antithetic
        self._gen = np.random.Generator(np.random.PCG64(seed))

    def standard_normal(self, size=None):
        z = self._gen.standard_normal(size)
        return -z if self.antithetic else z

    def normal(self, loc: float = 0.0, scale: float = 1.0, size=None):
        return loc + scale * self.standard_normal(size)

    def integers(self, high: int, size=None):
        """Uniform indices in ``[0, high)``."""
        return self._gen.integers(0, high, size)

    def poisson(self, lam: float, size=None):
        return self._gen.poisson(lam, size)
