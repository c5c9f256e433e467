"""Centralised factories for simulation random number generators."""

from __future__ import annotations

from dataclasses import dataclass, field
import hashlib
from typing import Callable, Dict, Sequence, TypeVar

from numpy.random import BitGenerator, Generator, PCG64

BitGeneratorFactory = Callable[[int], BitGenerator]

T = TypeVar("T")


def _default_bit_generator(seed: int) -> BitGenerator:
    return PCG64(seed)


_BITGEN_MODULUS = 2**128


def _stable_hash(value: str, *, modulo: int) -> int:
    """Return a deterministic hash of ``value`` bounded by ``modulo``."""

    digest = hashlib.blake2b(value.encode("utf-8"), digest_size=16).digest()
    return int.from_bytes(digest, "big") % modulo


@dataclass
class SimulationRandomness:
    """Provides independent seeded RNG streams per simulation subsystem."""

    seed: int
    salt: str | None = None
    bit_generator_factory: BitGeneratorFactory = _default_bit_generator
    _generators: Dict[str, Generator] = field(default_factory=dict)

    def _derive_seed(self, namespace: str, *, modulo: int) -> int:
        token = f"{self.seed}:{self.salt}:{namespace}" if self.salt else f"{self.seed}:{namespace}"
        derived = _stable_hash(token, modulo=modulo)
        # Zero is a degenerate seed for some bit generators.
        return derived or 1

    def generator(self, stream: str = "default") -> Generator:
        """Return (and cache) a ``numpy.random.Generator`` for ``stream``."""

        if stream not in self._generators:
            derived_seed = self._derive_seed(f"rng:{stream}", modulo=_BITGEN_MODULUS)
            bit_gen = self.bit_generator_factory(int(derived_seed))
            self._generators[stream] = Generator(bit_gen)
        return self._generators[stream]


def pick(rng: Generator, items: Sequence[T]) -> T:
    """Return one element of ``items`` chosen uniformly."""

    if not items:
        raise ValueError("cannot pick from an empty sequence")
    return items[int(rng.integers(len(items)))]


def shuffled(rng: Generator, items: Sequence[T]) -> list[T]:
    """Return a shuffled copy of ``items``."""

    order = rng.permutation(len(items))
    return [items[int(index)] for index in order]


__all__ = ["SimulationRandomness", "pick", "shuffled"]
