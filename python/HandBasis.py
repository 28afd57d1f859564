from typing import NamedTuple, Sequence

from Landmarks import INDEX_MCP, PINKY_MCP, WRIST
from VectorMath import Vec3, cross, dot, normalize, vec_len, vec_sub


class HandBasis(NamedTuple):
    """
    Orthonormal frame anchored to the knuckle row.

    x runs index MCP -> pinky MCP, z is the palm normal and y points up
    along the fingers. Finger flexion does not move the frame.
    """

    x: Vec3
    y: Vec3
    z: Vec3


IDENTITY_BASIS = HandBasis((1.0, 0.0, 0.0), (0.0, 1.0, 0.0), (0.0, 0.0, 1.0))


def compute_hand_basis(points: Sequence[Vec3]) -> HandBasis:
    wrist = points[WRIST]
    index_mcp = points[INDEX_MCP]
    pinky_mcp = points[PINKY_MCP]

    x_axis = normalize(vec_sub(pinky_mcp, index_mcp))
    z_axis = normalize(cross(x_axis, vec_sub(index_mcp, wrist)))
    y_axis = normalize(cross(z_axis, x_axis))

    # collapsed knuckle row or wrist on the knuckle line
    if min(vec_len(x_axis), vec_len(y_axis), vec_len(z_axis)) < 0.5:
        return IDENTITY_BASIS
    return HandBasis(x_axis, y_axis, z_axis)


def to_local(v: Vec3, basis: HandBasis) -> Vec3:
    return (dot(v, basis.x), dot(v, basis.y), dot(v, basis.z))
