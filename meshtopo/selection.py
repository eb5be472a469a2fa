# Copyright 2024, m3shware
#
# Permission is hereby granted, free of charge, to any person obtaining a
# copy of this software and associated documentation files (the "Software"),
# to deal in the Software without restriction, including without limitation
# the rights to use, copy, modify, merge, publish, distribute, sublicense,
# and/or sell copies of the Software, and to permit persons to whom the
# Software is furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in
# all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING
# FROM, OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS
# IN THE SOFTWARE.

""" Edge and edge loop selection.

A selection is a list of halfedge indices into the arena of a
:class:`~meshtopo.hds.Mesh`. Selections become invalid whenever the mesh
is confirmed again.

Edge loops are found by topological walks. Along the boundary the walk
follows adjacent boundary halfedges. In the interior it follows
``next.twin.next``, which continues straight through vertices of valence
four in a quad mesh.
"""

import logging
import math

import meshtopo.linalg as linalg
from meshtopo.paths import Knot


logger = logging.getLogger(__name__)


DEFAULT_ANGLE_SHIFT_LIMIT = 90.0


def _turn(e1, e2):
    """ Angle in degrees between two halfedge directions.
    """
    return linalg.angle(e1.vector, e2.vector, deg=True)


def _walk_boundary(anchor, end, limit, reverse=False):
    """ Collect boundary halfedges starting at `anchor`.

    Returns the halfedges found (excluding `anchor`) and whether the walk
    returned to the anchor.
    """
    found = []
    prev = anchor

    for _ in range(len(anchor._mesh.halfedges)):
        current = prev.adjacent_boundary(reverse=reverse)

        if current is None or _turn(prev, current) >= limit:
            break

        if current is anchor:
            return found, True

        found.append(current)

        if current is end:
            break

        prev = current

    return found, False


def _loop_heuristic(e1, e2, limit):
    """ Check if `e2` continues the edge loop through `e1`.

    The origins of both halfedges must be incident to the same number of
    faces. Boundary vertices, where a walk starts or ends, are exempt.
    Additionally, the loop must not turn by `limit` degrees or more.
    """
    v1 = e1.origin
    v2 = e2.origin

    if not (v1.boundary or v2.boundary) and v1.face_count != v2.face_count:
        logger.error('edge loop stopped at topological mismatch: edge ' +
                     '(%d, %d) has %d faces at its origin, edge (%d, %d) ' +
                     'has %d', e1._origin, e1.target.index, v1.face_count,
                     e2._origin, e2.target.index, v2.face_count)
        return False

    turn = _turn(e1, e2)

    if turn >= limit:
        logger.error('edge loop stopped at sharp turn of %.1f degrees ' +
                     'between edges (%d, %d) and (%d, %d)', turn,
                     e1._origin, e1.target.index, e2._origin,
                     e2.target.index)
        return False

    return True


def _walk_interior(anchor, end, limit):
    """ Interior edge loop through `anchor`.

    Returns the loop in walk order and whether it is closed.
    """
    steps = len(anchor._mesh.halfedges)
    start = anchor
    bounded = False

    # Find the start of the loop by walking backwards.
    for _ in range(steps):
        twin = start.prev.twin

        if twin is None or twin.prev.boundary:
            break

        prev = twin.prev

        if not _loop_heuristic(start, prev, limit):
            break

        if prev is anchor:
            # Closed loop, walk it from the anchor.
            start = anchor
            break

        start = prev

        if prev is end:
            bounded = True
            break

    # The end anchor lies behind the anchor: stop at the anchor instead.
    stop = anchor if bounded else end

    loop = [start._idx]
    current = start

    for _ in range(steps):
        twin = current.next.twin

        if twin is None or twin.next.boundary:
            break

        nxt = twin.next

        if not _loop_heuristic(current, nxt, limit):
            break

        if nxt is start:
            return loop, True

        loop.append(nxt._idx)

        if nxt is stop:
            break

        current = nxt

    return loop, False


def select_edge_loop(mesh, selection,
                     angle_shift_limit=DEFAULT_ANGLE_SHIFT_LIMIT):
    """ Grow a selection to an edge loop.

    The first selected halfedge is the anchor of the loop. If a second
    halfedge is selected, the loop ends there. Along the boundary the loop
    is walked in both directions starting at the anchor, interior loops
    follow ``next.twin.next``. A walk stops when it turns by
    `angle_shift_limit` degrees or more.

    Parameters
    ----------
    mesh : Mesh
        Mesh instance.
    selection : list[int]
        Selected halfedges. Selections of other sizes than one or two are
        returned unchanged.
    angle_shift_limit : float, optional
        Turn angle in degrees that stops a walk.

    Returns
    -------
    list[int]
        Halfedge indices of the loop. Open loops are ordered from start to
        end, closed loops in walk order starting at the anchor.
    """
    selection = list(selection)

    if not 1 <= len(selection) <= 2:
        return selection

    halfs = mesh.halfedges
    anchor = halfs[selection[0]]
    end = halfs[selection[-1]]

    if end is anchor:
        end = None

    if anchor.boundary:
        forward, closed = _walk_boundary(anchor, end, angle_shift_limit)
        loop = [anchor._idx] + [h._idx for h in forward]

        if not closed and end not in forward:
            backward, _ = _walk_boundary(anchor, end, angle_shift_limit,
                                         reverse=True)
            loop.extend(h._idx for h in backward)
    else:
        loop, closed = _walk_interior(anchor, end, angle_shift_limit)

    logger.debug('edge loop through %r: %d edges, closed=%s', anchor,
                 len(loop), closed)

    if closed:
        return loop

    ordered = sort_selected_edges(mesh, loop)

    return loop if ordered is None else ordered


def sort_selected_edges(mesh, selection):
    """ Order selected halfedges into a chain.

    Parameters
    ----------
    mesh : Mesh
        Mesh instance.
    selection : list[int]
        Selected halfedges.

    Returns
    -------
    list[int] or None
        Halfedge indices such that each halfedge starts where its
        predecessor ends. The chain starts at the first halfedge whose
        origin is not the target of another selected halfedge. If the
        chain breaks, the part found so far is returned. :obj:`None` if
        there is no such start, e.g., for closed loops.
    """
    halfs = mesh.halfedges
    edges = [(i, halfs[i]._origin, halfs[i].next._origin)
             for i in dict.fromkeys(selection)]

    if not edges:
        return []

    targets = {b for _, _, b in edges}
    start = next((e for e in edges if e[1] not in targets), None)

    if start is None:
        logger.error('could not find a unique start edge, the selection ' +
                     'may form a closed loop')
        return None

    chain = [start]
    remaining = [e for e in edges if e is not start]

    while remaining:
        link = next((e for e in remaining if e[1] == chain[-1][2]), None)

        if link is None:
            logger.warning('no edge continues the chain at vertex %d, the ' +
                           'selection may be disjoint (%d of %d edges ' +
                           'sorted)', chain[-1][2], len(chain), len(edges))
            break

        remaining.remove(link)
        chain.append(link)

    return [e[0] for e in chain]


def edges_to_path(mesh, selection, transform=None, normal_rotation_offset=0.0):
    """ Convert an edge chain to curve knots.

    Parameters
    ----------
    mesh : Mesh
        Mesh instance.
    selection : list[int]
        Selected halfedges, sorted with :func:`sort_selected_edges` first.
    transform : array_like, shape (4, 4), optional
        Transform from mesh to curve coordinates.
    normal_rotation_offset : float, optional
        Rotation in degrees of the up vectors about the edge directions.

    Returns
    -------
    list[Knot] or None
        One knot at the origin of every edge plus one at the target of
        the last edge. Knots look along their edge, the up vector is
        derived from the origin's vertex normal. :obj:`None` if the
        selection cannot be sorted.
    """
    ordered = sort_selected_edges(mesh, selection)

    if ordered is None:
        return None

    if transform is None:
        transform = linalg.translate((0.0, 0.0, 0.0))

    phi = math.radians(normal_rotation_offset)
    knots = []

    for k, i in enumerate(ordered):
        h = mesh.halfedges[i]

        v0 = linalg.transform_points(transform, h.origin.point)
        v1 = linalg.transform_points(transform, h.target.point)

        tangent = linalg.unit(v1 - v0)
        normal = linalg.unit(linalg.transform_vectors(transform,
                                                      h.origin.normal))
        rotation = linalg.look_rotation(tangent,
                                        linalg.rotate(normal, tangent, phi))

        knots.append(Knot(v0, rotation))

        if k == len(ordered) - 1:
            knots.append(Knot(v1, rotation))

    return knots


class EdgeSelection:
    """ Halfedge selection of a mesh.

    Parameters
    ----------
    mesh : Mesh
        The selected mesh.
    edges : iterable, optional
        Initially selected halfedge indices.
    angle_shift_limit : float, optional
        See :func:`select_edge_loop`.
    """

    def __init__(self, mesh, edges=(),
                 angle_shift_limit=DEFAULT_ANGLE_SHIFT_LIMIT):
        self.mesh = mesh
        self.edges = [int(e) for e in edges]
        self.angle_shift_limit = angle_shift_limit

    def __repr__(self):
        return f'EdgeSelection({self.edges})'

    def __len__(self):
        return len(self.edges)

    def __iter__(self):
        return iter(self.edges)

    def __contains__(self, item):
        return int(item) in self.edges

    def toggle(self, edge):
        """ Add or remove a halfedge.

        Returns
        -------
        bool
            :obj:`True` if the halfedge is selected afterwards.
        """
        edge = int(edge)

        if edge in self.edges:
            self.edges.remove(edge)
            return False

        self.edges.append(edge)
        return True

    def clear(self):
        self.edges = []

    def select_edge_loop(self):
        self.edges = select_edge_loop(self.mesh, self.edges,
                                      self.angle_shift_limit)
        return self.edges

    def sort(self):
        """ Sort the selection in place if it forms a chain.
        """
        ordered = sort_selected_edges(self.mesh, self.edges)

        if ordered is not None:
            self.edges = ordered

        return self.edges

    def to_path(self, transform=None, normal_rotation_offset=0.0):
        return edges_to_path(self.mesh, self.edges, transform,
                             normal_rotation_offset)
