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

""" Halfedge data structure.

A polygon mesh (with or without boundary) is described by three
containers:

    - a list of :class:`Vertex` objects,
    - a list of :class:`Face` objects,
    - and a list of :class:`Halfedge` objects (the halfedge arena).

These containers and the relations between their items are managed by
the :class:`Mesh` class. Halfedges are created per face corner in winding
order. Links between halfedges (successor, predecessor, twin) are stored
as arena indices, a halfedge without twin is a boundary halfedge.

The arena is never patched incrementally. Whenever the face list or the
vertex set is replaced, :meth:`Mesh.confirm` rebuilds all halfedges. Any
halfedge index obtained before that call is invalid afterwards.

Note
----
To ease debugging, this module relies on assertions which can slow down
script execution. You can disable assertions by running in optimized mode
via the "-O" command line argument.
"""

import logging

import numpy as np

import meshtopo.linalg as linalg


logger = logging.getLogger(__name__)


class EdgeKey:
    """ Undirected edge.

    Hash key formed by an unordered pair of vertex indices. Used to find
    the twin of a halfedge: ``EdgeKey(a, b) == EdgeKey(b, a)``.

    Parameters
    ----------
    a, b : int
        Vertex indices.
    """

    __slots__ = ('a', 'b')

    def __init__(self, a, b):
        self.a = int(a)
        self.b = int(b)

    def __repr__(self):
        return f'EdgeKey({self.a}, {self.b})'

    def __eq__(self, other):
        if not isinstance(other, EdgeKey):
            return NotImplemented

        return ((self.a == other.a and self.b == other.b) or
                (self.a == other.b and self.b == other.a))

    def __hash__(self):
        if self.a < self.b:
            return hash((self.a, self.b))

        return hash((self.b, self.a))


class Mesh:
    """ Mesh kernel.

    The combinatorics of a mesh are built by converting a sequence of
    vertex coordinates and a sequence of face definitions to its halfedge
    representation.

    Parameters
    ----------
    points : array_like, shape (n, 3), optional
        Vertex coordinates. Copied into an array owned by the mesh.
    faces : array_like, optional
        Face definitions, 0-based vertex indexing. Faces may have
        different numbers of vertices but at least three.
    normals : array_like, shape (n, 3), optional
        Vertex normals. Zero vectors if not given.
    name : str, optional
        Name tag.

    Raises
    ------
    NonManifoldError
        When more than two faces share an edge.
    ValueError
        If the input arrays have the wrong shape or a face has less than
        three vertices.
    IndexError
        If a face refers to a vertex that does not exist.
    """

    def __init__(self, points=None, faces=None, normals=None, *, name=None):
        """ Initialize from vertex and face lists.
        """
        if points is None and faces is not None:
            msg = "face definitions require 'points' argument != None"
            raise ValueError(msg)

        self._points = _vertex_array(points, 'points')

        if normals is None:
            self._normals = np.zeros_like(self._points)
        else:
            self._normals = _vertex_array(normals, 'normals')

        if len(self._normals) != len(self._points):
            msg = (f'number of normals ({len(self._normals)}) != ' +
                   f'number of vertices ({len(self._points)})')
            raise ValueError(msg)

        self._counts = np.zeros(len(self._points), dtype=np.int64)
        self._verts = [Vertex(i, parent=self)
                       for i in range(len(self._points))]

        # Outgoing halfedge indices per vertex. Rebuilt by confirm().
        self._vhout = [[] for _ in self._verts]

        self._faces = self._make_faces([] if faces is None else faces,
                                      len(self._points))
        self._halfs = []

        self._num_tris = 0
        self._num_quads = 0
        self._num_ngons = 0

        self.name = name

        self.confirm()

    def __iter__(self):
        """ Face iterator.

        Yields
        ------
        Face
            Next face in insertion order traversal.
        """
        return iter(self._faces)

    def __copy__(self):
        return self.copy()

    def __bool__(self):
        return True

    def __str__(self):
        v, e, f = self.size
        return (f'{self.name or "mesh"}: {v} vertices, {e} edges, ' +
                f'{f} faces ({self._num_tris} tris, {self._num_quads} ' +
                f'quads, {self._num_ngons} ngons), ' +
                f'{len(self._halfs)} halfedges')

    @property
    def points(self):
        """ Vertex coordinate array.

        Direct read and write access to vertex coordinates. Changing the
        size of the coordinate array is not supported, use
        :meth:`replace` instead.

        :type: ~numpy.ndarray
        """
        return self._points

    @property
    def normals(self):
        """ Vertex normal array.

        :type: ~numpy.ndarray
        """
        return self._normals

    @property
    def face_counts(self):
        """ Number of face corners per vertex.

        The number of halfedges that originate at a vertex. Recomputed
        whenever the halfedge arena is rebuilt.

        :type: ~numpy.ndarray
        """
        return self._counts

    @property
    def vertices(self):
        """ Vertex list.

        Read access to the vertex list. This list should not be modified
        directly.

        :type: list[Vertex]
        """
        return self._verts

    @property
    def faces(self):
        """ Face list.

        Read access to the face list. This list should not be modified
        directly. Plain vertex index lists are obtained via

        >>> faces = [f.indices for f in mesh.faces]

        :type: list[Face]
        """
        return self._faces

    @property
    def halfedges(self):
        """ Halfedge arena.

        Halfedges are stored face by face, in winding order within each
        face. The position of a halfedge in this list is its index.

        :type: list[Halfedge]
        """
        return self._halfs

    @property
    def size(self):
        """ Mesh size.

        The attribute value :math:`(v, e, f)` holds the number of vertices,
        the number of (undirected) edges, and the number of faces.

        :type: (int, int, int)
        """
        edges = sum(1 for h in self._halfs
                    if h._twin is None or h._idx < h._twin)

        return len(self._verts), edges, len(self._faces)

    @property
    def triangle_count(self):
        """ Number of triangular faces.

        :type: int
        """
        return self._num_tris

    @property
    def quad_count(self):
        """ Number of quadrilateral faces.

        :type: int
        """
        return self._num_quads

    @property
    def ngon_count(self):
        """ Number of faces with more than four vertices.

        :type: int
        """
        return self._num_ngons

    def copy(self):
        """ Mesh copy.

        Duplicate the mesh combinatorics, vertex coordinates and normals.

        Returns
        -------
        Mesh
            Copy of the mesh.
        """
        return Mesh(self._points.copy(), [f.indices for f in self._faces],
                    self._normals.copy(), name=self.name)

    def build(self, faces):
        """ Build halfedges.

        Creates one halfedge per face edge in winding order, links
        successors and predecessors cyclically within each face and
        resolves twins by hashing the undirected edge of each halfedge.
        The mesh itself is not modified.

        Parameters
        ----------
        faces : sequence
            Face definitions, sequences of vertex indices.

        Raises
        ------
        NonManifoldError
            If more than two halfedges map to the same undirected edge.

        Returns
        -------
        list[Halfedge]
            The new halfedge arena.
        """
        halfs = []
        edges = dict()

        for f, face in enumerate(faces):
            face = [int(v) for v in face]
            n = len(face)
            base = len(halfs)

            for k in range(n):
                h = Halfedge(base + k, face[k], f, parent=self)
                h._next = base + (k + 1) % n
                h._prev = base + (k - 1) % n

                halfs.append(h)

            # The first halfedge seen for an edge is stored, the second one
            # becomes its twin. There is no room for a third one.
            for k in range(n):
                h = halfs[base + k]
                key = EdgeKey(face[k], face[(k + 1) % n])
                i = edges.get(key)

                if i is None:
                    edges[key] = h._idx
                elif halfs[i]._twin is None:
                    h._twin = i
                    halfs[i]._twin = h._idx
                else:
                    other = halfs[halfs[i]._twin]
                    msg = (f'edge ({key.a}, {key.b}) is non-manifold, ' +
                           f'shared by faces #{halfs[i]._face}, ' +
                           f'#{other._face} and #{f}')
                    raise NonManifoldError(msg)

        return halfs

    def confirm(self):
        """ Rebuild the halfedge arena.

        Regenerates all halfedges from the current face list and
        recomputes per-vertex face counts as well as the triangle, quad,
        and n-gon counts. Must be called after any face list mutation.

        Raises
        ------
        NonManifoldError
            If the face list contains a non-manifold edge. The mesh is
            left unchanged in this case.
        """
        halfs = self.build(self._faces)
        self._commit(self._points, self._normals, self._faces, halfs)

    def replace(self, points=None, faces=None, normals=None):
        """ Replace vertices and/or faces.

        The replacement is atomic: the new halfedge arena is built first
        and the mesh is only modified if this succeeds.

        Parameters
        ----------
        points : array_like, shape (n, 3), optional
            New vertex coordinates.
        faces : sequence, optional
            New face definitions.
        normals : array_like, shape (n, 3), optional
            New vertex normals. If new points are given without normals,
            the old normals are kept when the vertex count is unchanged
            and reset to zero otherwise.

        Raises
        ------
        NonManifoldError
            If the new faces contain a non-manifold edge.
        ValueError
            If array shapes do not match.
        IndexError
            If a face refers to a vertex that does not exist.
        """
        new_points = (self._points if points is None
                      else _vertex_array(points, 'points'))

        if normals is not None:
            new_normals = _vertex_array(normals, 'normals')
        elif len(new_points) == len(self._normals):
            new_normals = self._normals
        else:
            new_normals = np.zeros_like(new_points)

        if len(new_normals) != len(new_points):
            msg = (f'number of normals ({len(new_normals)}) != ' +
                   f'number of vertices ({len(new_points)})')
            raise ValueError(msg)

        if faces is None:
            faces = [f.indices for f in self._faces]

        new_faces = self._make_faces(faces, len(new_points))
        halfs = self.build(new_faces)

        self._commit(new_points, new_normals, new_faces, halfs)

    def boundary_edges(self):
        """ Boundary halfedges.

        Returns
        -------
        list[Halfedge]
            All halfedges without twin, in arena order.
        """
        return [h for h in self._halfs if h._twin is None]

    def boundary_smoothing_groups(self, angle_threshold=45.0, points=None):
        """ Boundary smoothing groups.

        Walks each boundary loop and cuts it into runs of halfedges at
        every vertex where the boundary turns by more than
        `angle_threshold` degrees. Consecutive groups share the halfedge
        at a corner: the origins of a group's halfedges are all vertices
        of the run, including both corner vertices.

        Parameters
        ----------
        angle_threshold : float, optional
            Turn angle in degrees.
        points : array_like, shape (n, 3), optional
            Vertex coordinates to use instead of :attr:`points`.

        Returns
        -------
        list[list[Halfedge]] or None
            Smoothing groups of all boundary loops. :obj:`None` if there
            are no boundary halfedges or if a boundary loop does not close
            consistently.

        Note
        ----
        A loop without any corner yields a single group that ends with its
        first halfedge again, i.e., the group describes a closed contour.
        """
        points = self._points if points is None else np.asarray(points)
        boundary = self.boundary_edges()

        if not boundary:
            return None

        visited = set()
        groups = []

        for first in boundary:
            if first._idx in visited:
                continue

            loop = self._smoothing_groups(first, points, angle_threshold,
                                          visited)

            if loop is None:
                return None

            groups.extend(loop)

        return groups

    def _smoothing_groups(self, first, points, angle_threshold, visited):
        """ Smoothing groups of a single boundary loop.
        """
        groups = [[]]
        current = first

        visited.add(first._idx)

        while True:
            nxt = current.adjacent_boundary()
            nxtnxt = None if nxt is None else nxt.adjacent_boundary()

            if nxtnxt is None:
                logger.error('boundary loop inconsistency: no boundary ' +
                             'halfedge adjacent to %r (loop start %r)',
                             current if nxt is None else nxt, first)
                return None

            if not groups[-1]:
                groups[-1].append(current)

            groups[-1].append(nxt)

            p1 = points[current._origin]
            p2 = points[nxt._origin]
            p3 = points[nxtnxt._origin]

            if linalg.angle(p2 - p1, p3 - p2, deg=True) > angle_threshold:
                groups.append([])

            if nxt is first:
                break

            if nxt._idx in visited:
                logger.error('boundary loop inconsistency: expected loop ' +
                             'to close at %r, walk returned to %r',
                             first, nxt)
                return None

            visited.add(nxt._idx)
            current = nxt

        # The walk may have started in the middle of a group. In that case
        # the first and the last group form one contour segment.
        if len(groups) > 1 and groups[0] and groups[-1]:
            head = groups[0]
            tail = groups[-1]

            if tail[-1] is not head[0]:
                logger.error('boundary loop inconsistency: loop start %r ' +
                             '!= loop end %r', head[0], tail[-1])
                return None

            p1 = points[tail[-2]._origin]
            p2 = points[head[0]._origin]
            p3 = points[head[0].target]

            if linalg.angle(p2 - p1, p3 - p2, deg=True) <= angle_threshold:
                tail.pop()
                tail.extend(head)
                del groups[0]

        return [g for g in groups if g]

    def _make_faces(self, faces, num_verts):
        """ Validate face definitions and create face objects.
        """
        items = []

        for i, face in enumerate(faces):
            indices = [int(v) for v in face]

            if len(indices) < 3:
                raise ValueError(f'face #{i} has less than three vertices')

            for v in indices:
                if not 0 <= v < num_verts:
                    msg = f'face #{i} refers to missing vertex #{v}'
                    raise IndexError(msg)

            items.append(Face(i, indices, parent=self))

        return items

    def _commit(self, points, normals, faces, halfs):
        """ Install new containers and recompute derived data.
        """
        if len(points) != len(self._verts):
            self._verts = [Vertex(i, parent=self)
                           for i in range(len(points))]

        self._points = points
        self._normals = normals
        self._faces = faces
        self._halfs = halfs

        self._vhout = [[] for _ in self._verts]

        for face in faces:
            face._halfedge = None

        for h in halfs:
            self._vhout[h._origin].append(h._idx)

            face = faces[h._face]

            if face._halfedge is None:
                face._halfedge = h._idx

        self._counts = np.array([len(out) for out in self._vhout],
                                dtype=np.int64)

        sizes = [len(f) for f in faces]

        self._num_tris = sizes.count(3)
        self._num_quads = sizes.count(4)
        self._num_ngons = len(sizes) - self._num_tris - self._num_quads

    def _check(self):
        """ Perform sanity checks.
        """
        assert len(self._points) == len(self._verts)
        assert len(self._normals) == len(self._verts)
        assert len(self._halfs) == sum(len(f) for f in self._faces)

        for v in self._verts:
            v._check()

        for h in self._halfs:
            h._check()

        for f in self._faces:
            f._check()

    def _viter(self):
        return iter(self._verts)

    def _fiter(self):
        return iter(self._faces)

    def _hiter(self):
        return iter(self._halfs)


class Vertex:
    """ Vertex base class.

    Vertices are considered as abstract topological entities. Coordinates,
    normal and face count are stored in the arrays of the parent mesh and
    accessed via properties.

    Parameters
    ----------
    index : int
        Vertex index.
    parent : Mesh, optional
        The parent mesh object.

    Note
    ----
    The implementation of :meth:`~object.__index__` makes it possible to
    use vertex instances as list and array indices.
    """

    def __init__(self, index, parent=None):
        self._idx = index
        self._mesh = parent

    def __repr__(self):
        return f'Vertex({self._idx})'

    def __str__(self):
        return f'v {self._idx} {self.point} n {self.normal}'

    def __index__(self):
        return self._idx

    def __int__(self):
        return self._idx

    def __bool__(self):
        return True

    def __array__(self, dtype=None, copy=None):
        return np.array(self._mesh._points[self._idx, ...],
                        dtype=dtype, copy=copy)

    @property
    def index(self):
        """ Vertex index.

        :type: int
        """
        return self._idx

    @property
    def point(self):
        """ Vertex coordinates.

        View of the corresponding row of the parent mesh's coordinate
        array.

        :type: ~numpy.ndarray
        """
        return self._mesh._points[self._idx, ...]

    @point.setter
    def point(self, value):
        self._mesh._points[self._idx, ...] = value

    @property
    def normal(self):
        """ Vertex normal.

        :type: ~numpy.ndarray
        """
        return self._mesh._normals[self._idx, ...]

    @normal.setter
    def normal(self, value):
        self._mesh._normals[self._idx, ...] = value

    @property
    def face_count(self):
        """ Number of halfedges that originate at the vertex.

        :type: int
        """
        return int(self._mesh._counts[self._idx])

    @property
    def halfedge(self):
        """ Outgoing halfedge.

        A halfedge that starts at the vertex or :obj:`None` for isolated
        vertices.

        :type: Halfedge
        """
        out = self._mesh._vhout[self._idx]
        return self._mesh._halfs[out[0]] if out else None

    @property
    def boundary(self):
        """ Topological state.

        A vertex is a boundary vertex if an incident halfedge has no twin.

        :type: bool
        """
        halfs = self._mesh._halfs

        return any(halfs[i]._twin is None or halfs[halfs[i]._prev]._twin
                   is None for i in self._mesh._vhout[self._idx])

    @property
    def isolated(self):
        """ Topological state.

        :type: bool
        """
        return not self._mesh._vhout[self._idx]

    def _check(self):
        for i in self._mesh._vhout[self._idx]:
            assert self._mesh._halfs[i]._origin == self._idx

        assert self.face_count == len(self._mesh._vhout[self._idx])

    def _viter(self):
        """ Adjacent vertex iterator.
        """
        halfs = self._mesh._halfs
        seen = set()

        for i in self._mesh._vhout[self._idx]:
            h = halfs[i]

            for w in (halfs[h._next]._origin, halfs[h._prev]._origin):
                if w not in seen and w != self._idx:
                    seen.add(w)
                    yield self._mesh._verts[w]

    def _fiter(self):
        """ Incident face iterator.
        """
        seen = set()

        for i in self._mesh._vhout[self._idx]:
            f = self._mesh._halfs[i]._face

            if f not in seen:
                seen.add(f)
                yield self._mesh._faces[f]

    def _hiter(self):
        """ Outgoing halfedge iterator.
        """
        halfs = self._mesh._halfs
        return (halfs[i] for i in self._mesh._vhout[self._idx])


class Halfedge:
    """ Halfedge base class.

    A halfedge stores its origin vertex, the face it belongs to and the
    arena indices of its successor, predecessor, and twin. A closed loop
    of halfedges defines a face and its orientation.

    Parameters
    ----------
    index : int
        Position in the halfedge arena.
    origin : int
        Origin vertex index.
    face : int
        Index of the face the halfedge belongs to.
    parent : Mesh, optional
        The parent mesh object.

    Note
    ----
    Identity is positional. Two halfedges are the same if they have the
    same index in the same arena.
    """

    def __init__(self, index, origin, face, parent=None):
        self._idx = index
        self._origin = origin
        self._face = face
        self._mesh = parent

        self._next = None
        self._prev = None
        self._twin = None

    def __repr__(self):
        return f'Halfedge({self._idx})'

    def __str__(self):
        halfs = self._mesh._halfs
        twin = '-' if self._twin is None else self._twin

        return (f'h {self._idx} ({self._origin}, ' +
                f'{halfs[self._next]._origin}) twin {twin}')

    def __index__(self):
        return self._idx

    def __int__(self):
        return self._idx

    def __bool__(self):
        return True

    def __iter__(self):
        """ Vertex iterator.

        Produces the origin and target vertex of a halfedge.
        """
        yield self.origin
        yield self.target

    def __getitem__(self, index):
        if index == 0:
            return self.origin
        elif index == 1:
            return self.target

        raise IndexError(f'index {index} out of range(0, 2)')

    @property
    def index(self):
        """ Arena index.

        :type: int
        """
        return self._idx

    @property
    def origin(self):
        """ Halfedge origin vertex.

        :type: Vertex
        """
        return self._mesh._verts[self._origin]

    @property
    def target(self):
        """ Halfedge target vertex.

        Origin of the successor halfedge.

        :type: Vertex
        """
        return self._mesh._verts[self._mesh._halfs[self._next]._origin]

    @property
    def key(self):
        """ Undirected edge.

        :type: EdgeKey
        """
        return EdgeKey(self._origin, self._mesh._halfs[self._next]._origin)

    @property
    def vector(self):
        """ Halfedge direction vector.

        The vector ``self.target.point - self.origin.point``.

        :type: ~numpy.ndarray
        """
        return self.target.point - self.origin.point

    @property
    def next(self):
        """ Successor halfedge.

        :type: Halfedge
        """
        return self._mesh._halfs[self._next]

    @property
    def prev(self):
        """ Predecessor halfedge.

        :type: Halfedge
        """
        return self._mesh._halfs[self._prev]

    @property
    def twin(self):
        """ Opposite halfedge.

        Halfedge of the neighboring face pointing in the opposite direction
        or :obj:`None` for a boundary halfedge.

        :type: Halfedge
        """
        if self._twin is None:
            return None

        return self._mesh._halfs[self._twin]

    @property
    def face(self):
        """ Incident face.

        :type: Face
        """
        return self._mesh._faces[self._face]

    @property
    def boundary(self):
        """ Topological state.

        A halfedge is called a boundary halfedge if it has no twin.

        :type: bool
        """
        return self._twin is None

    def adjacent_boundary(self, reverse=False):
        """ Neighboring boundary halfedge.

        Rotates around the target vertex (or the origin vertex if
        `reverse` is set) until a boundary halfedge is found: follow the
        successor and, as long as the candidate has a twin, continue with
        the twin's successor. The reverse rotation uses predecessors.

        Parameters
        ----------
        reverse : bool, optional
            Find the boundary halfedge that ends at this halfedge's origin
            instead of the one starting at its target.

        Returns
        -------
        Halfedge or None
            The adjacent boundary halfedge. :obj:`None` if the rotation
            does not reach the boundary.

        Note
        ----
        Usually called on boundary halfedges, but the rotation is valid
        for interior halfedges, too.
        """
        halfs = self._mesh._halfs
        h = halfs[self._prev if reverse else self._next]

        for _ in range(len(halfs)):
            if h._twin is None:
                return h

            twin = halfs[h._twin]
            h = halfs[twin._prev if reverse else twin._next]

        return None

    def _compute_loop_len(self):
        """ Length of halfedge loop.

        Returns
        -------
        int
            Number of successor steps needed to return to ``self``.
        """
        loop_len = 0
        h = self

        while True:
            loop_len += 1
            h = h.next

            if h is self:
                return loop_len

    def _check(self):
        halfs = self._mesh._halfs

        assert halfs[self._idx] is self
        assert halfs[self._next]._prev == self._idx
        assert halfs[self._prev]._next == self._idx
        assert self._compute_loop_len() == len(self.face)

        if self._twin is not None:
            twin = halfs[self._twin]

            assert twin._twin == self._idx
            assert twin.key == self.key


class Face:
    """ Face base class.

    A face is an ordered list of vertex indices. Its halfedge loop starts
    at :attr:`halfedge`.

    Parameters
    ----------
    index : int
        Face index.
    indices : list[int]
        Vertex indices in winding order.
    parent : Mesh, optional
        The parent mesh object.


    The vertices of a face can be visited with

    .. code-block:: python

        for v in f:
            print(v.point)
    """

    def __init__(self, index, indices, parent=None):
        self._idx = index
        self._verts = indices
        self._mesh = parent
        self._halfedge = None

    def __repr__(self):
        return f'Face({self._idx})'

    def __str__(self):
        return f'f {self._idx} {self._verts}'

    def __index__(self):
        return self._idx

    def __int__(self):
        return self._idx

    def __len__(self):
        """ Number of face vertices, same as number of face edges.
        """
        return len(self._verts)

    def __bool__(self):
        return True

    def __array__(self, dtype=None, copy=None):
        return np.array(self._mesh._points[self._verts, ...],
                        dtype=dtype, copy=copy)

    def __contains__(self, item):
        return int(item) in self._verts

    def __iter__(self):
        """ Vertex iterator.

        Yields
        ------
        Vertex
            Next vertex in winding order.
        """
        return self._viter()

    def __getitem__(self, index):
        return self._mesh._verts[self._verts[index]]

    @property
    def index(self):
        """ Face index.

        :type: int
        """
        return self._idx

    @property
    def indices(self):
        """ Vertex indices.

        Copy of the face definition.

        :type: list[int]
        """
        return list(self._verts)

    @property
    def halfedge(self):
        """ First halfedge of the face loop.

        :type: Halfedge
        """
        return self._mesh._halfs[self._halfedge]

    @property
    def boundary(self):
        """ Topological state.

        A face is a boundary face if one of its halfedges has no twin.

        :type: bool
        """
        return any(h._twin is None for h in self._hiter())

    def _check(self):
        h = self.halfedge

        assert h._face == self._idx
        assert [h._origin for h in self._hiter()] == self._verts

    def _viter(self):
        verts = self._mesh._verts
        return (verts[v] for v in self._verts)

    def _hiter(self):
        """ Halfedge loop iterator.
        """
        halfs = self._mesh._halfs
        start = self._halfedge

        return (halfs[start + k] for k in range(len(self._verts)))


class TopologyError(Exception):
    """ Topology exception base class.

    Raised if mesh connectivity is inconsistent.
    """

    pass


class NonManifoldError(TopologyError):
    """ Manifold exception.

    Raised if an operation results in a topological configuration that
    violates the manifold condition, i.e., more than two faces share an
    edge.
    """

    pass


def _vertex_array(data, name):
    """ Copy vertex data into a float array of shape (n, 3).
    """
    if data is None:
        return np.zeros((0, 3))

    array = np.array(data, dtype=float)

    if array.size == 0:
        return np.zeros((0, 3))

    if array.ndim != 2 or array.shape[1] != 3:
        raise ValueError(f"'{name}' must have shape (n, 3), " +
                         f'got {array.shape}')

    return array
