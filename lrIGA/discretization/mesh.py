"""
LR mesh topology.

The Mesh class is the central data structure that:
1. Owns all elements and basis functions (arena keyed by integer id)
2. Maintains bidirectional Element <-> BasisFunction linking
3. Answers the support queries needed by field recovery

Key design principles:
- Elements and basis functions stored as dictionaries by ID
- Basis function ids are exactly 0..n_basis-1; ascending id is the
  canonical enumeration used for every coefficient array
- Callers only see ids and read-only queries, never the ownership

Bidirectional linking invariant:
    bf_id in element.basis_function_ids  <=>  element.id in basis_functions[bf_id].supported_elements

Elements of an LR mesh are not the cells of a tensor grid. A mesh line
only extends over the support of the functions whose knot vectors carry
it, so cells of the global breakpoint grid that are not separated by a
mesh line merge into one element. build_lr_mesh derives the elements
from the local knot vectors alone.
"""

import numpy as np
from typing import List, Dict, Set, Tuple, Iterator, Optional

from .knot_vector import KnotVector
from .element import Element
from .basis_function import BasisFunction


class Mesh:
    """
    LR mesh: elements, basis functions and their connectivity.

    Attributes:
        elements: Dictionary mapping element ID -> Element
        basis_functions: Dictionary mapping basis function ID -> BasisFunction

    Key invariant:
        The bidirectional linking between elements and basis functions
        is always consistent. Any modification must update both sides.
    """

    def __init__(self,
                 elements: Dict[int, Element],
                 basis_functions: Dict[int, BasisFunction]):
        """
        Initialize mesh with elements and basis functions.

        Parameters:
            elements: Dictionary of elements by ID
            basis_functions: Dictionary of basis functions by ID (0..n-1)
        """
        self._elements = elements
        self._basis_functions = basis_functions

        if sorted(basis_functions.keys()) != list(range(len(basis_functions))):
            raise ValueError("Basis function ids must be exactly 0..n_basis-1")

        degrees = {bf.degrees for bf in basis_functions.values()}
        if len(degrees) > 1:
            raise ValueError(f"Basis functions have mixed degrees: {sorted(degrees)}")
        self._degrees = degrees.pop() if degrees else (0, 0)

        self._verify_linking_invariant()

    def _verify_linking_invariant(self) -> None:
        """
        Verify the bidirectional linking invariant.

        Raises ValueError if invariant is violated.
        """
        for eid, elem in self._elements.items():
            for bf_id in elem.basis_function_ids:
                if bf_id not in self._basis_functions:
                    raise ValueError(
                        f"Element {eid} references non-existent basis function {bf_id}"
                    )
                if eid not in self._basis_functions[bf_id].supported_elements:
                    raise ValueError(
                        f"Bidirectional linking violated: "
                        f"basis function {bf_id} not linked back to element {eid}"
                    )

        for bf_id, bf in self._basis_functions.items():
            for eid in bf.supported_elements:
                if eid not in self._elements:
                    raise ValueError(
                        f"Basis function {bf_id} references non-existent element {eid}"
                    )
                if bf_id not in self._elements[eid].basis_function_ids:
                    raise ValueError(
                        f"Bidirectional linking violated: "
                        f"element {eid} not linked back to basis function {bf_id}"
                    )

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def elements(self) -> Dict[int, Element]:
        """All elements."""
        return self._elements

    @property
    def basis_functions(self) -> Dict[int, BasisFunction]:
        """All basis functions."""
        return self._basis_functions

    @property
    def n_elements(self) -> int:
        """Number of elements."""
        return len(self._elements)

    @property
    def n_basis(self) -> int:
        """Number of basis functions."""
        return len(self._basis_functions)

    @property
    def degrees(self) -> Tuple[int, int]:
        """Polynomial degrees (p_u, p_v), shared by all basis functions."""
        return self._degrees

    @property
    def domain(self) -> Tuple[Tuple[float, float], Tuple[float, float]]:
        """Parametric bounding box of all elements."""
        bounds = [e.parametric_bounds for e in self._elements.values()]
        return ((min(b[0][0] for b in bounds), max(b[0][1] for b in bounds)),
                (min(b[1][0] for b in bounds), max(b[1][1] for b in bounds)))

    # -------------------------------------------------------------------------
    # Iteration
    # -------------------------------------------------------------------------

    def iter_basis_functions(self) -> Iterator[BasisFunction]:
        """Basis functions in canonical (ascending id) order."""
        for bf_id in range(self.n_basis):
            yield self._basis_functions[bf_id]

    def iter_elements(self) -> Iterator[Element]:
        """Elements in ascending id order."""
        for eid in sorted(self._elements.keys()):
            yield self._elements[eid]

    def get_element(self, element_id: int) -> Element:
        """Get element by ID."""
        return self._elements[element_id]

    def get_basis_function(self, bf_id: int) -> BasisFunction:
        """Get basis function by ID."""
        return self._basis_functions[bf_id]

    # -------------------------------------------------------------------------
    # Connectivity queries
    # -------------------------------------------------------------------------

    def get_element_connectivity(self, element_id: int) -> List[int]:
        """
        Get the basis function IDs supported on an element.

        Parameters:
            element_id: Element ID

        Returns:
            List of basis function IDs in local ordering
        """
        return list(self._elements[element_id].basis_function_ids)

    def get_support(self, bf_id: int) -> List[int]:
        """
        Get the element IDs on which a basis function is non-zero.

        Parameters:
            bf_id: Basis function ID

        Returns:
            Sorted list of element IDs
        """
        return sorted(self._basis_functions[bf_id].supported_elements)

    def get_extended_support(self, bf_id: int) -> List[int]:
        """
        Get the extended support of a basis function.

        The extended support is the union of the supports of every basis
        function that is non-zero on at least one element of the direct
        support. It always contains the direct support.

        Parameters:
            bf_id: Basis function ID

        Returns:
            Sorted list of element IDs
        """
        extended: Set[int] = set()
        for eid in self._basis_functions[bf_id].supported_elements:
            for other in self._elements[eid].basis_function_ids:
                extended |= self._basis_functions[other].supported_elements
        return sorted(extended)

    def find_element(self, u: float, v: float) -> Element:
        """
        Find the element containing a parametric point.

        Uses half-open intervals [min, max) except at the upper domain
        boundary, which is closed.

        Parameters:
            u, v: Parametric coordinates

        Returns:
            Element containing (u, v)
        """
        (u_lo, u_hi), (v_lo, v_hi) = self.domain
        for elem in self._elements.values():
            if elem.contains_point(u, v, (u_hi, v_hi)):
                return elem
        raise ValueError(
            f"Parameter ({u}, {v}) outside domain [{u_lo}, {u_hi}] x [{v_lo}, {v_hi}]"
        )

    def print_connectivity_summary(self) -> str:
        """
        Generate a human-readable connectivity summary.

        Returns:
            String summary of element-basis function connectivity
        """
        lines = []
        lines.append("=" * 60)
        lines.append("LR MESH CONNECTIVITY SUMMARY")
        lines.append("=" * 60)
        lines.append(f"Elements: {self.n_elements}")
        lines.append(f"Basis functions: {self.n_basis} (degrees {self.degrees})")
        lines.append("")

        lines.append("Element Connectivity:")
        lines.append("-" * 40)
        for elem in self.iter_elements():
            ids = elem.basis_function_ids
            lines.append(f"  E[{elem.id}] {elem.parametric_bounds}: "
                         f"{len(ids)} functions -> {ids[:5]}{'...' if len(ids) > 5 else ''}")
        lines.append("")

        lines.append("Basis Function Support:")
        lines.append("-" * 40)
        for bf in self.iter_basis_functions():
            lines.append(f"  N[{bf.id}]: {self.get_support(bf.id)} "
                         f"(extended {self.get_extended_support(bf.id)})")
        lines.append("=" * 60)

        return "\n".join(lines)


# =============================================================================
# Mesh builders
# =============================================================================

def _mesh_line_segments(basis_functions: List[BasisFunction], direction: int
                        ) -> Dict[float, List[Tuple[float, float]]]:
    """
    Collect the knot line segments of all basis functions.

    For direction 0 the segments are lines u = const spanning the v-support
    of the function; for direction 1 lines v = const spanning the u-support.
    Zero-length segments are dropped.

    Returns:
        Dictionary mapping line position -> list of (start, end) extents
    """
    segments: Dict[float, List[Tuple[float, float]]] = {}
    for bf in basis_functions:
        if direction == 0:
            positions, extent = bf.knots_u, bf.knots_v
        else:
            positions, extent = bf.knots_v, bf.knots_u
        lo, hi = extent[0], extent[-1]
        if hi <= lo:
            continue
        for position in np.unique(positions):
            segments.setdefault(float(position), []).append((lo, hi))
    return segments


def _is_cut(segments: Dict[float, List[Tuple[float, float]]],
            position: float, lo: float, hi: float) -> bool:
    """True if some segment on line `position` covers [lo, hi]."""
    for s_lo, s_hi in segments.get(position, []):
        if s_lo <= lo and hi <= s_hi:
            return True
    return False


def build_lr_mesh(basis_functions: List[BasisFunction]) -> Mesh:
    """
    Build an LR mesh from basis functions with local knot vectors.

    The basis functions are renumbered 0..n-1 in list order. Elements are
    the maximal rectangles of the breakpoint grid not crossed by any knot
    line segment, numbered row by row with u varying fastest.

    Parameters:
        basis_functions: Basis functions defining the spline space

    Returns:
        Mesh with linked elements and basis functions

    Raises:
        ValueError: if the knot lines do not partition the domain into
            rectangles
    """
    for i, bf in enumerate(basis_functions):
        bf.id = i
        bf.supported_elements = set()

    if not basis_functions:
        return Mesh({}, {})

    us = np.unique(np.concatenate([bf.knots_u for bf in basis_functions]))
    vs = np.unique(np.concatenate([bf.knots_v for bf in basis_functions]))
    vertical = _mesh_line_segments(basis_functions, 0)
    horizontal = _mesh_line_segments(basis_functions, 1)

    n_u, n_v = len(us) - 1, len(vs) - 1

    # Flood fill grid cells that are not separated by a mesh line
    label = -np.ones((n_u, n_v), dtype=int)
    n_labels = 0
    for j in range(n_v):
        for i in range(n_u):
            if label[i, j] >= 0:
                continue
            label[i, j] = n_labels
            stack = [(i, j)]
            while stack:
                a, b = stack.pop()
                neighbours = []
                if a + 1 < n_u and not _is_cut(vertical, us[a + 1], vs[b], vs[b + 1]):
                    neighbours.append((a + 1, b))
                if a > 0 and not _is_cut(vertical, us[a], vs[b], vs[b + 1]):
                    neighbours.append((a - 1, b))
                if b + 1 < n_v and not _is_cut(horizontal, vs[b + 1], us[a], us[a + 1]):
                    neighbours.append((a, b + 1))
                if b > 0 and not _is_cut(horizontal, vs[b], us[a], us[a + 1]):
                    neighbours.append((a, b - 1))
                for cell in neighbours:
                    if label[cell] < 0:
                        label[cell] = n_labels
                        stack.append(cell)
            n_labels += 1

    boxes = []
    for k in range(n_labels):
        ii, jj = np.nonzero(label == k)
        i0, i1, j0, j1 = ii.min(), ii.max(), jj.min(), jj.max()
        if len(ii) != (i1 - i0 + 1) * (j1 - j0 + 1):
            raise ValueError(
                f"Mesh lines do not bound a rectangle around "
                f"[{us[i0]}, {us[i1 + 1]}] x [{vs[j0]}, {vs[j1 + 1]}]"
            )
        boxes.append(((float(us[i0]), float(us[i1 + 1])),
                      (float(vs[j0]), float(vs[j1 + 1]))))

    boxes.sort(key=lambda b: (b[1][0], b[0][0]))
    elements = {eid: Element(id=eid, parametric_bounds=bounds)
                for eid, bounds in enumerate(boxes)}

    for bf in basis_functions:
        for elem in elements.values():
            if bf.covers(elem.parametric_bounds):
                bf.add_element(elem.id)
                elem.add_basis_function(bf.id)

    return Mesh(elements, {bf.id: bf for bf in basis_functions})


def build_tensor_basis(kv_u: KnotVector, kv_v: KnotVector,
                       coefficients: np.ndarray,
                       weights: Optional[np.ndarray] = None) -> List[BasisFunction]:
    """
    Basis functions of a tensor-product B-spline in LR form.

    Function (i, j) gets id j * n_u + i (u varies fastest) and the local
    knot vectors kv_u.local_knots(i), kv_v.local_knots(j).

    Parameters:
        kv_u, kv_v: Global knot vectors
        coefficients: Array of shape (n_u * n_v, dim) in the same ordering
        weights: Optional NURBS weights, shape (n_u * n_v,)

    Returns:
        List of basis functions in canonical order
    """
    n_u, n_v = kv_u.n_basis, kv_v.n_basis
    coefficients = np.asarray(coefficients, dtype=np.float64)
    if coefficients.ndim == 1:
        coefficients = coefficients.reshape(-1, 1)
    if coefficients.shape[0] != n_u * n_v:
        raise ValueError(
            f"Expected {n_u * n_v} coefficient rows, got {coefficients.shape[0]}"
        )
    if weights is None:
        weights = np.ones(n_u * n_v)

    basis_functions = []
    for j in range(n_v):
        for i in range(n_u):
            k = j * n_u + i
            basis_functions.append(BasisFunction(
                id=k,
                knots_u=kv_u.local_knots(i),
                knots_v=kv_v.local_knots(j),
                coefficients=coefficients[k].copy(),
                weight=float(weights[k]),
            ))
    return basis_functions
