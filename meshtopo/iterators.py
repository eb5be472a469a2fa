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

""" Combinatorial mesh item neighborhood iterators.

Incident mesh items are visited in winding order as determined by the
face definitions (whenever it makes sense to consider oriented item
traversal). Boundary loops are traversed with :func:`boundary`.
"""


def verts(obj):
    """ Vertex iterator.

    The returned iterator traverses adjacent/incident vertices
    of `obj` depending on its type:

    .. table::
       :width: 100%
       :widths: 20, 80

       =============== ================================================
       :class:`Vertex` traversal of adjacent vertices
       --------------- ------------------------------------------------
       :class:`Face`   traversal of incident vertices in winding order
       --------------- ------------------------------------------------
       :class:`Mesh`   in-order traversal of :attr:`~Mesh.vertices`
       =============== ================================================

    Parameters
    ----------
    obj : Vertex or Face or Mesh
        The base object.

    Yields
    ------
    Vertex
    """
    return obj._viter()


def halfedges(obj):
    """ Halfedge iterator.

    .. table::
       :width: 100%
       :widths: 20, 80

       =============== ================================================
       :class:`Vertex` traversal of outgoing halfedges
       --------------- ------------------------------------------------
       :class:`Face`   traversal of the face's halfedge loop
       --------------- ------------------------------------------------
       :class:`Mesh`   in-order traversal of :attr:`~Mesh.halfedges`
       =============== ================================================

    Parameters
    ----------
    obj : Vertex or Face or Mesh
        The base object.

    Yields
    ------
    Halfedge
    """
    return obj._hiter()


def faces(obj):
    """ Face iterator.

    Parameters
    ----------
    obj : Vertex or Mesh
        The base object. Faces incident to a vertex are reported once,
        even if the vertex appears more than once in a face definition.

    Yields
    ------
    Face
    """
    return obj._fiter()


def boundary(halfedge, reverse=False):
    """ Boundary loop iterator.

    Starting with `halfedge`, yields adjacent boundary halfedges until the
    loop closes or no adjacent boundary halfedge can be found.

    Parameters
    ----------
    halfedge : Halfedge
        Boundary halfedge.
    reverse : bool, optional
        Traverse the loop against its orientation.

    Yields
    ------
    Halfedge
    """
    # Guards against loops that never return to the start halfedge.
    seen = set()
    h = halfedge

    while h is not None and h._idx not in seen:
        seen.add(h._idx)
        yield h

        h = h.adjacent_boundary(reverse=reverse)
