"""Dense row-major matrices of floats with basic linear algebra."""

from __future__ import annotations

import math
import warnings
from numbers import Real
from typing import Iterable, Sequence

__all__ = ["Matrix", "MatrixError", "pythag"]


class MatrixError(ValueError):
    """Raised when a matrix operation gets operands of the wrong shape or is singular."""


def pythag(a: float, b: float) -> float:
    """Return sqrt(a**2 + b**2) without destructive underflow or overflow."""
    absa = abs(a)
    absb = abs(b)
    if absa > absb:
        return absa * math.sqrt(1.0 + (absb / absa) ** 2)
    if absb == 0.0:
        return 0.0
    return absb * math.sqrt(1.0 + (absa / absb) ** 2)


def _sign(a: float, b: float) -> float:
    return abs(a) if b >= 0.0 else -abs(a)


class Matrix:
    """A rows x cols matrix of floats, initialised to zero."""

    __slots__ = ("rows", "cols", "_val")
    __hash__ = None  # type: ignore[assignment]

    def __init__(self, rows: int = 0, cols: int = 0, values: Iterable[float] | None = None):
        self.rows = abs(int(rows))
        self.cols = abs(int(cols))
        self._val = [[0.0] * self.cols for _ in range(self.rows)]
        if values is not None:
            flat = [float(x) for x in values]
            if len(flat) != self.rows * self.cols:
                raise MatrixError(
                    f"Expected {self.rows * self.cols} values for a "
                    f"({self.rows}x{self.cols}) matrix, got {len(flat)}"
                )
            self._val = [flat[i * self.cols:(i + 1) * self.cols] for i in range(self.rows)]

    @classmethod
    def _from_rows(cls, rows: Sequence[Sequence[float]]) -> "Matrix":
        result = cls(len(rows), len(rows[0]) if rows else 0)
        result._val = [[float(x) for x in row] for row in rows]
        return result

    def _copy(self) -> "Matrix":
        return Matrix._from_rows(self._val) if self.rows else Matrix(self.rows, self.cols)

    # ----- constructors -------------------------------------------------

    @classmethod
    def identity(cls, size: int) -> "Matrix":
        """Return the size x size identity matrix."""
        result = cls(size, size)
        for i in range(result.rows):
            result._val[i][i] = 1.0
        return result

    @classmethod
    def diag(cls, vector: "Matrix") -> "Matrix":
        """Return a square diagonal matrix built from a row or column vector."""
        if vector.rows > 1 and vector.cols == 1:
            entries = [row[0] for row in vector._val]
        elif vector.rows == 1 and vector.cols > 1:
            entries = list(vector._val[0])
        else:
            raise MatrixError(
                f"Trying to create diagonal matrix from vector of size "
                f"({vector.rows}x{vector.cols})"
            )
        result = cls(len(entries), len(entries))
        for i, value in enumerate(entries):
            result._val[i][i] = value
        return result

    @classmethod
    def rot_x(cls, angle: float) -> "Matrix":
        """Rotation by angle (radians) about the x axis."""
        s, c = math.sin(angle), math.cos(angle)
        return cls(3, 3, [1.0, 0.0, 0.0, 0.0, c, -s, 0.0, s, c])

    @classmethod
    def rot_y(cls, angle: float) -> "Matrix":
        """Rotation by angle (radians) about the y axis."""
        s, c = math.sin(angle), math.cos(angle)
        return cls(3, 3, [c, 0.0, s, 0.0, 1.0, 0.0, -s, 0.0, c])

    @classmethod
    def rot_z(cls, angle: float) -> "Matrix":
        """Rotation by angle (radians) about the z axis."""
        s, c = math.sin(angle), math.cos(angle)
        return cls(3, 3, [c, -s, 0.0, s, c, 0.0, 0.0, 0.0, 1.0])

    @classmethod
    def cross(cls, a: "Matrix", b: "Matrix") -> "Matrix":
        """Cross product of two 3x1 column vectors."""
        if a.shape != (3, 1) or b.shape != (3, 1):
            raise MatrixError("Cross product vectors must be of size (3x1)")
        (a0,), (a1,), (a2,) = a._val
        (b0,), (b1,), (b2,) = b._val
        return cls(3, 1, [a1 * b2 - a2 * b1, a2 * b0 - a0 * b2, a0 * b1 - a1 * b0])

    # ----- element access -----------------------------------------------

    @property
    def shape(self) -> tuple[int, int]:
        return self.rows, self.cols

    def _check_index(self, key) -> tuple[int, int]:
        i, j = key
        if not (0 <= i < self.rows and 0 <= j < self.cols):
            raise IndexError(f"Index ({i}, {j}) out of range for ({self.rows}x{self.cols}) matrix")
        return i, j

    def __getitem__(self, key) -> float:
        i, j = self._check_index(key)
        return self._val[i][j]

    def __setitem__(self, key, value: float) -> None:
        i, j = self._check_index(key)
        self._val[i][j] = float(value)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.shape == other.shape and self._val == other._val

    def _block(self, i1: int, j1: int, i2: int, j2: int, action: str) -> tuple[int, int, int, int]:
        if i2 == -1:
            i2 = self.rows - 1
        if j2 == -1:
            j2 = self.cols - 1
        if i1 < 0 or i2 >= self.rows or j1 < 0 or j2 >= self.cols or i2 < i1 or j2 < j1:
            raise MatrixError(
                f"Cannot {action} submatrix [{i1}..{i2}] x [{j1}..{j2}] "
                f"of a ({self.rows}x{self.cols}) matrix"
            )
        return i1, j1, i2, j2

    def get_data(self, i1: int = 0, j1: int = 0, i2: int = -1, j2: int = -1) -> list[float]:
        """Return the entries of a block, row by row, as a flat list."""
        i1, j1, i2, j2 = self._block(i1, j1, i2, j2, "get")
        return [x for row in self._val[i1:i2 + 1] for x in row[j1:j2 + 1]]

    def get_mat(self, i1: int, j1: int, i2: int = -1, j2: int = -1) -> "Matrix":
        """Return the block [i1..i2] x [j1..j2] as a new matrix."""
        i1, j1, i2, j2 = self._block(i1, j1, i2, j2, "get")
        return Matrix._from_rows([row[j1:j2 + 1] for row in self._val[i1:i2 + 1]])

    def set_mat(self, other: "Matrix", i1: int = 0, j1: int = 0) -> None:
        """Copy other into this matrix with its top-left corner at (i1, j1)."""
        if i1 < 0 or j1 < 0 or i1 + other.rows > self.rows or j1 + other.cols > self.cols:
            raise MatrixError(
                f"Cannot set submatrix [{i1}..{i1 + other.rows - 1}] x "
                f"[{j1}..{j1 + other.cols - 1}] of a ({self.rows}x{self.cols}) matrix"
            )
        for i, row in enumerate(other._val):
            self._val[i1 + i][j1:j1 + other.cols] = row

    def set_val(self, s: float, i1: int = 0, j1: int = 0, i2: int = -1, j2: int = -1) -> None:
        """Set every entry of the block [i1..i2] x [j1..j2] to s."""
        if i2 == -1:
            i2 = self.rows - 1
        if j2 == -1:
            j2 = self.cols - 1
        if i2 < i1 or j2 < j1:
            raise MatrixError("Indices must be ordered (i1<=i2, j1<=j2)")
        i1, j1, i2, j2 = self._block(i1, j1, i2, j2, "set")
        for row in self._val[i1:i2 + 1]:
            row[j1:j2 + 1] = [float(s)] * (j2 - j1 + 1)

    def set_diag(self, s: float, i1: int = 0, i2: int = -1) -> None:
        """Set the diagonal entries i1..i2 to s."""
        if i2 == -1:
            i2 = min(self.rows - 1, self.cols - 1)
        for i in range(i1, i2 + 1):
            self[i, i] = s

    def zero(self) -> None:
        """Set every entry to zero."""
        self._val = [[0.0] * self.cols for _ in range(self.rows)]

    def set_identity(self) -> None:
        """Overwrite with ones on the main diagonal and zeros elsewhere."""
        self.zero()
        for i in range(min(self.rows, self.cols)):
            self._val[i][i] = 1.0

    def extract_cols(self, idx: Sequence[int]) -> "Matrix":
        """Return the columns listed in idx; indices beyond the matrix give zero columns."""
        result = Matrix(self.rows, len(idx))
        for j, col in enumerate(idx):
            if 0 <= col < self.cols:
                for out_row, row in zip(result._val, self._val):
                    out_row[j] = row[col]
        return result

    def reshape(self, rows: int, cols: int) -> "Matrix":
        """Return the same entries, in row-major order, as a rows x cols matrix."""
        if self.rows * self.cols != rows * cols:
            raise MatrixError(
                f"Trying to reshape a matrix of size ({self.rows}x{self.cols}) "
                f"to size ({rows}x{cols})"
            )
        flat = [x for row in self._val for x in row]
        return Matrix(rows, cols, flat)

    # ----- arithmetic ----------------------------------------------------

    def __add__(self, other: "Matrix") -> "Matrix":
        if not isinstance(other, Matrix):
            return NotImplemented
        if self.shape != other.shape:
            raise MatrixError(
                f"Trying to add matrices of size ({self.rows}x{self.cols}) "
                f"and ({other.rows}x{other.cols})"
            )
        return Matrix._from_rows(
            [[x + y for x, y in zip(ra, rb)] for ra, rb in zip(self._val, other._val)]
        ) if self.rows else Matrix(self.rows, self.cols)

    def __sub__(self, other: "Matrix") -> "Matrix":
        if not isinstance(other, Matrix):
            return NotImplemented
        if self.shape != other.shape:
            raise MatrixError(
                f"Trying to subtract matrices of size ({self.rows}x{self.cols}) "
                f"and ({other.rows}x{other.cols})"
            )
        return Matrix._from_rows(
            [[x - y for x, y in zip(ra, rb)] for ra, rb in zip(self._val, other._val)]
        ) if self.rows else Matrix(self.rows, self.cols)

    def __mul__(self, other) -> "Matrix":
        if isinstance(other, Matrix):
            if self.cols != other.rows:
                raise MatrixError(
                    f"Trying to multiply matrices of size ({self.rows}x{self.cols}) "
                    f"and ({other.rows}x{other.cols})"
                )
            result = Matrix(self.rows, other.cols)
            columns = list(zip(*other._val))
            for out_row, row in zip(result._val, self._val):
                for j, col in enumerate(columns):
                    total = 0.0
                    for x, y in zip(row, col):
                        total += x * y
                    out_row[j] = total
            return result
        if isinstance(other, Real):
            s = float(other)
            result = Matrix(self.rows, self.cols)
            result._val = [[x * s for x in row] for row in self._val]
            return result
        return NotImplemented

    def __rmul__(self, other) -> "Matrix":
        if isinstance(other, Real):
            return self * other
        return NotImplemented

    def __truediv__(self, other) -> "Matrix":
        if isinstance(other, Real):
            s = float(other)
            if abs(s) < 1e-20:
                raise ZeroDivisionError("Trying to divide by zero")
            result = Matrix(self.rows, self.cols)
            result._val = [[x / s for x in row] for row in self._val]
            return result
        if not isinstance(other, Matrix):
            return NotImplemented
        if self.shape == other.shape:
            divisor = lambda i, j: other._val[i][j]  # noqa: E731
        elif self.rows == other.rows and other.cols == 1:
            divisor = lambda i, j: other._val[i][0]  # noqa: E731
        elif self.cols == other.cols and other.rows == 1:
            divisor = lambda i, j: other._val[0][j]  # noqa: E731
        else:
            raise MatrixError(
                f"Trying to divide matrices of size ({self.rows}x{self.cols}) "
                f"and ({other.rows}x{other.cols})"
            )
        result = Matrix(self.rows, self.cols)
        for i, row in enumerate(self._val):
            for j, x in enumerate(row):
                d = divisor(i, j)
                if d != 0:
                    result._val[i][j] = x / d
        return result

    def __neg__(self) -> "Matrix":
        result = Matrix(self.rows, self.cols)
        result._val = [[-x for x in row] for row in self._val]
        return result

    def transpose(self) -> "Matrix":
        """Return the transposed matrix."""
        result = Matrix(self.cols, self.rows)
        if self.rows and self.cols:
            result._val = [list(col) for col in zip(*self._val)]
        return result

    def l2norm(self) -> float:
        """Frobenius norm."""
        return math.sqrt(sum(x * x for row in self._val for x in row))

    def mean(self) -> float:
        """Mean of all entries."""
        if self.rows == 0 or self.cols == 0:
            raise MatrixError("Mean of an empty matrix is undefined")
        return sum(x for row in self._val for x in row) / (self.rows * self.cols)

    # ----- decompositions ---------------------------------------------------

    def inverse(self) -> "Matrix":
        """Return the inverse; raises MatrixError if not square or singular."""
        if self.rows != self.cols:
            raise MatrixError(f"Trying to invert matrix of size ({self.rows}x{self.cols})")
        result = Matrix.identity(self.rows)
        result.solve(self)
        return result

    def invert(self) -> None:
        """Invert this matrix in place."""
        self._val = self.inverse()._val

    def det(self) -> float:
        """Determinant computed from an LU decomposition."""
        if self.rows != self.cols:
            raise MatrixError(
                f"Trying to compute determinant of a matrix of size ({self.rows}x{self.cols})"
            )
        work = self._copy()
        try:
            _, d = work.lu()
        except MatrixError:
            return 0.0
        for i in range(work.rows):
            d *= work._val[i][i]
        return d

    def solve(self, a: "Matrix", eps: float = 1e-20) -> None:
        """Replace this matrix B by the solution X of a * X = B (Gauss-Jordan).

        Raises MatrixError on mismatched shapes or when a is singular; this
        matrix is left unchanged in that case.
        """
        m, n = self.rows, self.cols
        if a.rows != a.cols or a.rows != m or m < 1 or n < 1:
            raise MatrixError(
                f"Trying to eliminate matrices of size ({a.rows}x{a.cols}) and ({m}x{n})"
            )
        lhs = [row[:] for row in a._val]
        rhs = [row[:] for row in self._val]
        ipiv = [0] * m
        for _ in range(m):
            big = 0.0
            irow = icol = 0
            for j in range(m):
                if ipiv[j] == 1:
                    continue
                for k in range(m):
                    if ipiv[k] == 0 and abs(lhs[j][k]) >= big:
                        big = abs(lhs[j][k])
                        irow, icol = j, k
            ipiv[icol] += 1
            if irow != icol:
                lhs[irow], lhs[icol] = lhs[icol], lhs[irow]
                rhs[irow], rhs[icol] = rhs[icol], rhs[irow]
            if abs(lhs[icol][icol]) < eps:
                raise MatrixError("Matrix is singular")
            pivinv = 1.0 / lhs[icol][icol]
            lhs[icol][icol] = 1.0
            lhs[icol] = [x * pivinv for x in lhs[icol]]
            rhs[icol] = [x * pivinv for x in rhs[icol]]
            for ll in range(m):
                if ll == icol:
                    continue
                dum = lhs[ll][icol]
                lhs[ll][icol] = 0.0
                lhs[ll] = [x - p * dum for x, p in zip(lhs[ll], lhs[icol])]
                rhs[ll] = [x - p * dum for x, p in zip(rhs[ll], rhs[icol])]
        self._val = rhs

    def lu(self, eps: float = 1e-20) -> tuple[list[int], float]:
        """Replace this matrix by the LU decomposition of a row permutation of itself.

        Returns the pivot indices and the permutation parity (+1.0 or -1.0).
        Raises MatrixError if the matrix is not square or has an all-zero row.
        """
        if self.rows != self.cols:
            raise MatrixError(f"Trying to LU decompose a matrix of size ({self.rows}x{self.cols})")
        n = self.cols
        val = self._val
        d = 1.0
        scaling = []
        for row in val:
            big = max((abs(x) for x in row), default=0.0)
            if big == 0.0:
                raise MatrixError("Matrix has a row of zeros")
            scaling.append(1.0 / big)
        idx = [0] * n
        for j in range(n):
            for i in range(j):
                total = val[i][j]
                for k in range(i):
                    total -= val[i][k] * val[k][j]
                val[i][j] = total
            big = 0.0
            imax = j
            for i in range(j, n):
                total = val[i][j]
                for k in range(j):
                    total -= val[i][k] * val[k][j]
                val[i][j] = total
                dum = scaling[i] * abs(total)
                if dum >= big:
                    big = dum
                    imax = i
            if j != imax:
                val[imax], val[j] = val[j], val[imax]
                d = -d
                scaling[imax] = scaling[j]
            idx[j] = imax
            if j != n - 1 and val[j][j] != 0.0:
                dum = 1.0 / val[j][j]
                for i in range(j + 1, n):
                    val[i][j] *= dum
        return idx, d

    def svd(self) -> tuple["Matrix", "Matrix", "Matrix"]:
        """Singular value decomposition self = U * diag(W) * V^T.

        Returns U (rows x rows), W (min(rows, cols) x 1, sorted decreasing)
        and V (cols x cols).
        """
        m, n = self.rows, self.cols
        if m == 0 or n == 0:
            raise MatrixError("Cannot decompose an empty matrix")
        u = [row[:] for row in self._val]
        v = [[0.0] * n for _ in range(n)]
        w = [0.0] * n
        rv1 = [0.0] * n

        # Householder reduction to bidiagonal form.
        g = scale = anorm = 0.0
        l = 0
        for i in range(n):
            l = i + 1
            rv1[i] = scale * g
            g = s = scale = 0.0
            if i < m:
                for k in range(i, m):
                    scale += abs(u[k][i])
                if scale:
                    for k in range(i, m):
                        u[k][i] /= scale
                        s += u[k][i] * u[k][i]
                    f = u[i][i]
                    g = -_sign(math.sqrt(s), f)
                    h = f * g - s
                    u[i][i] = f - g
                    for j in range(l, n):
                        s = 0.0
                        for k in range(i, m):
                            s += u[k][i] * u[k][j]
                        f = s / h
                        for k in range(i, m):
                            u[k][j] += f * u[k][i]
                    for k in range(i, m):
                        u[k][i] *= scale
            w[i] = scale * g
            g = s = scale = 0.0
            if i < m and i != n - 1:
                for k in range(l, n):
                    scale += abs(u[i][k])
                if scale:
                    for k in range(l, n):
                        u[i][k] /= scale
                        s += u[i][k] * u[i][k]
                    f = u[i][l]
                    g = -_sign(math.sqrt(s), f)
                    h = f * g - s
                    u[i][l] = f - g
                    for k in range(l, n):
                        rv1[k] = u[i][k] / h
                    for j in range(l, m):
                        s = 0.0
                        for k in range(l, n):
                            s += u[j][k] * u[i][k]
                        for k in range(l, n):
                            u[j][k] += s * rv1[k]
                    for k in range(l, n):
                        u[i][k] *= scale
            anorm = max(anorm, abs(w[i]) + abs(rv1[i]))

        # Accumulation of right-hand transformations.
        for i in range(n - 1, -1, -1):
            if i < n - 1:
                if g:
                    for j in range(l, n):
                        v[j][i] = (u[i][j] / u[i][l]) / g
                    for j in range(l, n):
                        s = 0.0
                        for k in range(l, n):
                            s += u[i][k] * v[k][j]
                        for k in range(l, n):
                            v[k][j] += s * v[k][i]
                for j in range(l, n):
                    v[i][j] = v[j][i] = 0.0
            v[i][i] = 1.0
            g = rv1[i]
            l = i

        # Accumulation of left-hand transformations.
        for i in range(min(m, n) - 1, -1, -1):
            l = i + 1
            g = w[i]
            for j in range(l, n):
                u[i][j] = 0.0
            if g:
                g = 1.0 / g
                for j in range(l, n):
                    s = 0.0
                    for k in range(l, m):
                        s += u[k][i] * u[k][j]
                    f = (s / u[i][i]) * g
                    for k in range(i, m):
                        u[k][j] += f * u[k][i]
                for j in range(i, m):
                    u[j][i] *= g
            else:
                for j in range(i, m):
                    u[j][i] = 0.0
            u[i][i] += 1.0

        # Diagonalization of the bidiagonal form.
        for k in range(n - 1, -1, -1):
            for its in range(30):
                flag = True
                nm = k - 1
                l = k
                while l >= 0:
                    nm = l - 1
                    if abs(rv1[l]) + anorm == anorm:
                        flag = False
                        break
                    if abs(w[nm]) + anorm == anorm:
                        break
                    l -= 1
                if flag:
                    c, s = 0.0, 1.0
                    for i in range(l, k + 1):
                        f = s * rv1[i]
                        rv1[i] = c * rv1[i]
                        if abs(f) + anorm == anorm:
                            break
                        g = w[i]
                        h = pythag(f, g)
                        w[i] = h
                        h = 1.0 / h
                        c = g * h
                        s = -f * h
                        for row in u:
                            y, z = row[nm], row[i]
                            row[nm] = y * c + z * s
                            row[i] = z * c - y * s
                z = w[k]
                if l == k:
                    if z < 0.0:
                        w[k] = -z
                        for row in v:
                            row[k] = -row[k]
                    break
                if its == 29:
                    warnings.warn("SVD: no convergence in 30 iterations", RuntimeWarning, stacklevel=2)
                x = w[l]
                nm = k - 1
                y = w[nm]
                g = rv1[nm]
                h = rv1[k]
                f = ((y - z) * (y + z) + (g - h) * (g + h)) / (2.0 * h * y)
                g = pythag(f, 1.0)
                f = ((x - z) * (x + z) + h * ((y / (f + _sign(g, f))) - h)) / x
                c = s = 1.0
                for j in range(l, nm + 1):
                    i = j + 1
                    g = rv1[i]
                    y = w[i]
                    h = s * g
                    g = c * g
                    z = pythag(f, h)
                    rv1[j] = z
                    c = f / z
                    s = h / z
                    f = x * c + g * s
                    g = g * c - x * s
                    h = y * s
                    y *= c
                    for row in v:
                        x, z = row[j], row[i]
                        row[j] = x * c + z * s
                        row[i] = z * c - x * s
                    z = pythag(f, h)
                    w[j] = z
                    if z:
                        z = 1.0 / z
                        c = f * z
                        s = h * z
                    f = c * g + s * y
                    x = c * y - s * g
                    for row in u:
                        y, z = row[j], row[i]
                        row[j] = y * c + z * s
                        row[i] = z * c - y * s
                rv1[l] = 0.0
                rv1[k] = f
                w[k] = x

        # Shell sort by decreasing singular value, moving columns of u and v along.
        inc = 1
        while True:
            inc = inc * 3 + 1
            if inc > n:
                break
        while True:
            inc //= 3
            for i in range(inc, n):
                sw = w[i]
                su = [row[i] for row in u]
                sv = [row[i] for row in v]
                j = i
                while w[j - inc] < sw:
                    w[j] = w[j - inc]
                    for row in u:
                        row[j] = row[j - inc]
                    for row in v:
                        row[j] = row[j - inc]
                    j -= inc
                    if j < inc:
                        break
                w[j] = sw
                for row, x in zip(u, su):
                    row[j] = x
                for row, x in zip(v, sv):
                    row[j] = x
            if inc <= 1:
                break

        # Flip signs so that most entries of each column pair are non-negative.
        for k in range(n):
            negatives = sum(1 for row in u if row[k] < 0.0) + sum(1 for row in v if row[k] < 0.0)
            if negatives > (m + n) // 2:
                for row in u:
                    row[k] = -row[k]
                for row in v:
                    row[k] = -row[k]

        count = min(m, n)
        singular = Matrix(count, 1, w[:count])
        left = Matrix(m, m)
        left.set_mat(Matrix._from_rows(u).get_mat(0, 0, m - 1, min(m - 1, n - 1)), 0, 0)
        right = Matrix._from_rows(v)
        return left, singular, right

    def __str__(self) -> str:
        if self.rows == 0 or self.cols == 0:
            return "[empty matrix]"
        return "\n".join("".join(f"{x:12.7f} " for x in row) for row in self._val)

    def __repr__(self) -> str:
        return f"Matrix({self.rows}, {self.cols}, {self.get_data() if self.rows and self.cols else []})"