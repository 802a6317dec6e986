"""Elevation noise: seeded 2D gradient noise sampled per tile.

Each NoiseField draws its permutation table from the generator it is given,
so two fields built from identically seeded generators agree everywhere.
"""

import numpy as np
from numpy.typing import ArrayLike, NDArray

# Unit-ish gradient directions, indexed by hash & 7
_GRADIENTS = np.array(
    [
        [1.0, 1.0],
        [-1.0, 1.0],
        [1.0, -1.0],
        [-1.0, -1.0],
        [1.0, 0.0],
        [-1.0, 0.0],
        [0.0, 1.0],
        [0.0, -1.0],
    ],
    dtype=np.float64,
)


def _fade(t: NDArray[np.float64]) -> NDArray[np.float64]:
    """Perlin's quintic ease curve 6t^5 - 15t^4 + 10t^3."""
    return t * t * t * (t * (t * 6.0 - 15.0) + 10.0)


def _lerp(
    a: NDArray[np.float64], b: NDArray[np.float64], t: NDArray[np.float64]
) -> NDArray[np.float64]:
    return a + t * (b - a)


class NoiseField:
    """Deterministic elevation field over integer grid coordinates.

    Args:
        rng: Random number generator; consumed once at construction.
        scale: Coordinate divisor. Larger values give smoother terrain.
        octaves: Number of fractal layers summed together.
        lacunarity: Frequency multiplier between octaves.
        gain: Amplitude multiplier between octaves.
    """

    def __init__(
        self,
        rng: np.random.Generator,
        scale: float = 50.0,
        octaves: int = 1,
        lacunarity: float = 2.0,
        gain: float = 0.5,
    ):
        if scale <= 0:
            raise ValueError(f"Noise scale must be positive, got {scale}")
        if octaves < 1:
            raise ValueError(f"Noise needs at least one octave, got {octaves}")
        self.scale = scale
        self.octaves = octaves
        self.lacunarity = lacunarity
        self.gain = gain

        perm = rng.permutation(256).astype(np.int64)
        self._perm = np.concatenate([perm, perm])

    def elevation(self, x: int, y: int) -> float:
        """Elevation at one grid coordinate, in [-1, 1]."""
        return float(self.sample([x], [y])[0])

    def sample(self, xs: ArrayLike, ys: ArrayLike) -> NDArray[np.float64]:
        """Evaluate elevation at many coordinates at once.

        Args:
            xs: Row coordinates.
            ys: Column coordinates, broadcastable against xs.

        Returns:
            Array of elevations in [-1, 1] with the broadcast shape.
        """
        px = np.asarray(xs, dtype=np.float64) / self.scale
        py = np.asarray(ys, dtype=np.float64) / self.scale

        result = np.zeros(np.broadcast(px, py).shape, dtype=np.float64)
        frequency = 1.0
        amplitude = 1.0
        max_amplitude = 0.0

        for _ in range(self.octaves):
            result += amplitude * self._gradient_noise(px * frequency, py * frequency)
            max_amplitude += amplitude
            frequency *= self.lacunarity
            amplitude *= self.gain

        result /= max_amplitude
        return np.clip(result, -1.0, 1.0)

    def sample_grid(self, width: int, height: int) -> NDArray[np.float64]:
        """Elevation for every tile, shape (height, width)."""
        xs, ys = np.meshgrid(np.arange(height), np.arange(width), indexing="ij")
        return self.sample(xs, ys)

    def _gradient_noise(
        self, px: NDArray[np.float64], py: NDArray[np.float64]
    ) -> NDArray[np.float64]:
        x0 = np.floor(px).astype(np.int64)
        y0 = np.floor(py).astype(np.int64)
        fx = px - x0
        fy = py - y0
        xi = x0 & 255
        yi = y0 & 255

        n00 = self._corner(xi, yi, fx, fy)
        n10 = self._corner(xi + 1, yi, fx - 1.0, fy)
        n01 = self._corner(xi, yi + 1, fx, fy - 1.0)
        n11 = self._corner(xi + 1, yi + 1, fx - 1.0, fy - 1.0)

        u = _fade(fx)
        v = _fade(fy)
        return _lerp(_lerp(n00, n10, u), _lerp(n01, n11, u), v)

    def _corner(
        self,
        ix: NDArray[np.int64],
        iy: NDArray[np.int64],
        dx: NDArray[np.float64],
        dy: NDArray[np.float64],
    ) -> NDArray[np.float64]:
        h = self._perm[self._perm[ix] + iy] & 7
        g = _GRADIENTS[h]
        return g[..., 0] * dx + g[..., 1] * dy
