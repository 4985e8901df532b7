"""Integer LU decomposition solving a small linear system."""

from __future__ import annotations

from .harness import Benchmark

NMAX = 20
N = 5
X_REF = [0, 0, 1, 1, 1, 2] + [0] * (NMAX - 6)


def _cdiv(numerator: int, denominator: int) -> int:
    """Integer division truncating toward zero."""
    quotient = abs(numerator) // abs(denominator)
    return -quotient if (numerator < 0) != (denominator < 0) else quotient


def make_system(n: int = N) -> tuple[list[list[int]], list[int]]:
    """Build the ``(n+1) x (n+1)`` matrix and right-hand side of the benchmark."""
    a = [
        [(i + 1) + (j + 1) if i != j else 2 * ((i + 1) + (j + 1))
         for j in range(n + 1)]
        for i in range(n + 1)
    ]
    b = [sum(row) for row in a]
    return a, b


def ludcmp(a: list[list[int]], b: list[int], n: int) -> list[int]:
    """Decompose ``a`` in place and return the solution vector of length n+1."""
    for i in range(n):
        for j in range(i + 1, n + 1):
            w = a[j][i] - sum(a[j][k] * a[k][i] for k in range(i))
            a[j][i] = _cdiv(w, a[i][i])
        row = a[i + 1]
        for j in range(i + 1, n + 1):
            row[j] -= sum(row[k] * a[k][j] for k in range(i + 1))

    y = [b[0]]
    for i in range(1, n + 1):
        y.append(b[i] - sum(a[i][j] * y[j] for j in range(i)))

    x = [0] * (n + 1)
    x[n] = _cdiv(y[n], a[n][n])
    for i in range(n - 1, -1, -1):
        w = y[i] - sum(a[i][j] * x[j] for j in range(i + 1, n + 1))
        x[i] = _cdiv(w, a[i][i])
    return x


class Ud(Benchmark):
    """Repeatedly solve the fixed system and keep the last solution."""

    scale_factor = 1478

    def __init__(self, cpu_mhz: int = 1) -> None:
        super().__init__(cpu_mhz)
        self.x = [0] * NMAX

    def benchmark_body(self, rpt: int) -> int:
        chkerr = 0
        for _ in range(rpt):
            a, b = make_system(N)
            solution = ludcmp(a, b, N)
            self.x = solution + [0] * (NMAX - len(solution))
            chkerr = 0
        return chkerr

    def verify(self, result: int) -> bool:
        return self.x == X_REF and result == 0