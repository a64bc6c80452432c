#!/usr/bin/env python3
"""
Physics Primitives for the Submarine Simulation Core

Implements the math shared by every subsystem:
- 3D vector operations
- Unit quaternion rotations (composition, inverse, look-at, Euler extraction)
- Vehicle pose with position, orientation and linear velocity

Coordinate convention:
- Y is up, the sea surface is the plane y = 0 and depth = -y
- A body's forward axis is -Z in its local frame
"""

from __future__ import annotations
import math
from dataclasses import dataclass, field
from typing import Optional


# =============================================================================
# CONSTANTS
# =============================================================================

# Height of the sea surface plane
SURFACE_Y = 0.0

# Tolerance used for vector equality and degenerate checks
EPSILON = 1e-10


# =============================================================================
# VECTOR3D CLASS
# =============================================================================

@dataclass
class Vector3D:
    """
    3D vector for positions, velocities, and directions.

    Uses a right-handed coordinate system where:
    - X: right
    - Y: up (towards the surface)
    - Z: backward (a body faces -Z)
    """
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __add__(self, other: Vector3D) -> Vector3D:
        """Vector addition."""
        return Vector3D(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: Vector3D) -> Vector3D:
        """Vector subtraction."""
        return Vector3D(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, scalar: float) -> Vector3D:
        """Scalar multiplication."""
        return Vector3D(self.x * scalar, self.y * scalar, self.z * scalar)

    def __rmul__(self, scalar: float) -> Vector3D:
        """Right scalar multiplication."""
        return self.__mul__(scalar)

    def __truediv__(self, scalar: float) -> Vector3D:
        """Scalar division."""
        if scalar == 0:
            raise ValueError("Cannot divide vector by zero")
        return Vector3D(self.x / scalar, self.y / scalar, self.z / scalar)

    def __neg__(self) -> Vector3D:
        """Negation."""
        return Vector3D(-self.x, -self.y, -self.z)

    def __eq__(self, other: object) -> bool:
        """Equality check with tolerance."""
        if not isinstance(other, Vector3D):
            return False
        return (abs(self.x - other.x) < EPSILON and
                abs(self.y - other.y) < EPSILON and
                abs(self.z - other.z) < EPSILON)

    def dot(self, other: Vector3D) -> float:
        """Dot product."""
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: Vector3D) -> Vector3D:
        """Cross product."""
        return Vector3D(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x
        )

    @property
    def magnitude(self) -> float:
        """Vector magnitude (length)."""
        return math.sqrt(self.x**2 + self.y**2 + self.z**2)

    @property
    def magnitude_squared(self) -> float:
        """Squared magnitude (avoids sqrt for comparisons)."""
        return self.x**2 + self.y**2 + self.z**2

    @property
    def horizontal(self) -> Vector3D:
        """Projection onto the horizontal (x, z) plane."""
        return Vector3D(self.x, 0.0, self.z)

    def normalized(self) -> Vector3D:
        """Return unit vector in same direction, or zero for a zero vector."""
        mag = self.magnitude
        if mag == 0:
            return Vector3D(0, 0, 0)
        return self / mag

    def distance_to(self, other: Vector3D) -> float:
        """Distance to another point."""
        return (self - other).magnitude

    def lerp(self, other: Vector3D, t: float) -> Vector3D:
        """Linear interpolation towards another vector (t=0 self, t=1 other)."""
        return self + (other - self) * t

    def with_y(self, y: float) -> Vector3D:
        """Copy with the vertical component replaced."""
        return Vector3D(self.x, y, self.z)

    def copy(self) -> Vector3D:
        return Vector3D(self.x, self.y, self.z)

    def to_tuple(self) -> tuple[float, float, float]:
        """Convert to tuple."""
        return (self.x, self.y, self.z)

    @classmethod
    def from_tuple(cls, t: tuple[float, float, float]) -> Vector3D:
        """Create from tuple."""
        return cls(t[0], t[1], t[2])

    @classmethod
    def zero(cls) -> Vector3D:
        """Zero vector."""
        return cls(0.0, 0.0, 0.0)

    @classmethod
    def unit_y(cls) -> Vector3D:
        """Unit vector in Y direction (up)."""
        return cls(0.0, 1.0, 0.0)

    @classmethod
    def forward(cls) -> Vector3D:
        """Local forward direction (-Z)."""
        return cls(0.0, 0.0, -1.0)

    def __repr__(self) -> str:
        return f"Vector3D({self.x:.6g}, {self.y:.6g}, {self.z:.6g})"


# =============================================================================
# QUATERNION CLASS
# =============================================================================

@dataclass
class Quaternion:
    """
    Unit quaternion representing a 3D rotation.

    Composition follows the usual convention: ``(a * b).rotate(v)`` applies
    ``b`` first, then ``a``.
    """
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    w: float = 1.0

    def __mul__(self, other: Quaternion) -> Quaternion:
        """Hamilton product (rotation composition)."""
        return Quaternion(
            x=self.w * other.x + self.x * other.w + self.y * other.z - self.z * other.y,
            y=self.w * other.y - self.x * other.z + self.y * other.w + self.z * other.x,
            z=self.w * other.z + self.x * other.y - self.y * other.x + self.z * other.w,
            w=self.w * other.w - self.x * other.x - self.y * other.y - self.z * other.z,
        )

    def __eq__(self, other: object) -> bool:
        """Equality check with tolerance (q and -q are the same rotation)."""
        if not isinstance(other, Quaternion):
            return False
        dot = self.x * other.x + self.y * other.y + self.z * other.z + self.w * other.w
        return abs(abs(dot) - 1.0) < 1e-9

    @property
    def norm(self) -> float:
        return math.sqrt(self.x**2 + self.y**2 + self.z**2 + self.w**2)

    def normalized(self) -> Quaternion:
        """Return the unit quaternion, or identity for a zero quaternion."""
        n = self.norm
        if n == 0:
            return Quaternion.identity()
        return Quaternion(self.x / n, self.y / n, self.z / n, self.w / n)

    def inverse(self) -> Quaternion:
        """Inverse rotation (conjugate of a unit quaternion)."""
        return Quaternion(-self.x, -self.y, -self.z, self.w)

    def rotate(self, v: Vector3D) -> Vector3D:
        """
        Rotate a vector by this quaternion.

        v' = v + 2w(u x v) + 2u x (u x v), where u is the vector part.
        """
        u = Vector3D(self.x, self.y, self.z)
        uv = u.cross(v)
        uuv = u.cross(uv)
        return v + uv * (2.0 * self.w) + uuv * 2.0

    def to_euler_yxz(self) -> tuple[float, float, float]:
        """
        Extract Euler angles for the Y-X-Z rotation order.

        Returns:
            Tuple of (yaw, pitch, roll) in radians, where yaw is about Y,
            pitch about X and roll about Z.
        """
        x, y, z, w = self.x, self.y, self.z, self.w
        m02 = 2.0 * (x * z + w * y)
        m22 = 1.0 - 2.0 * (x * x + y * y)
        m12 = 2.0 * (y * z - w * x)
        m10 = 2.0 * (x * y + w * z)
        m11 = 1.0 - 2.0 * (x * x + z * z)

        # Clamp to avoid floating point errors with asin
        pitch = math.asin(max(-1.0, min(1.0, -m12)))
        yaw = math.atan2(m02, m22)
        roll = math.atan2(m10, m11)
        return yaw, pitch, roll

    @property
    def yaw(self) -> float:
        """Rotation about the vertical axis (radians)."""
        return self.to_euler_yxz()[0]

    def copy(self) -> Quaternion:
        return Quaternion(self.x, self.y, self.z, self.w)

    @classmethod
    def identity(cls) -> Quaternion:
        """No rotation."""
        return cls(0.0, 0.0, 0.0, 1.0)

    @classmethod
    def from_axis_angle(cls, axis: Vector3D, angle_rad: float) -> Quaternion:
        """Rotation of angle_rad around axis (right-hand rule)."""
        k = axis.normalized()
        half = angle_rad / 2.0
        s = math.sin(half)
        return cls(k.x * s, k.y * s, k.z * s, math.cos(half))

    @classmethod
    def from_rotation_y(cls, angle_rad: float) -> Quaternion:
        """Rotation around the vertical axis (positive turns left)."""
        half = angle_rad / 2.0
        return cls(0.0, math.sin(half), 0.0, math.cos(half))

    @classmethod
    def from_axes(
        cls,
        x_axis: Vector3D,
        y_axis: Vector3D,
        z_axis: Vector3D
    ) -> Quaternion:
        """
        Create from the columns of an orthonormal rotation matrix.

        Args:
            x_axis: Image of local +X
            y_axis: Image of local +Y
            z_axis: Image of local +Z

        Returns:
            Equivalent unit quaternion
        """
        m00, m10, m20 = x_axis.x, x_axis.y, x_axis.z
        m01, m11, m21 = y_axis.x, y_axis.y, y_axis.z
        m02, m12, m22 = z_axis.x, z_axis.y, z_axis.z

        trace = m00 + m11 + m22
        if trace > 0:
            s = math.sqrt(trace + 1.0) * 2.0
            q = cls(
                x=(m21 - m12) / s,
                y=(m02 - m20) / s,
                z=(m10 - m01) / s,
                w=0.25 * s,
            )
        elif m00 > m11 and m00 > m22:
            s = math.sqrt(1.0 + m00 - m11 - m22) * 2.0
            q = cls(
                x=0.25 * s,
                y=(m01 + m10) / s,
                z=(m02 + m20) / s,
                w=(m21 - m12) / s,
            )
        elif m11 > m22:
            s = math.sqrt(1.0 + m11 - m00 - m22) * 2.0
            q = cls(
                x=(m01 + m10) / s,
                y=0.25 * s,
                z=(m12 + m21) / s,
                w=(m02 - m20) / s,
            )
        else:
            s = math.sqrt(1.0 + m22 - m00 - m11) * 2.0
            q = cls(
                x=(m02 + m20) / s,
                y=(m12 + m21) / s,
                z=0.25 * s,
                w=(m10 - m01) / s,
            )
        return q.normalized()

    @classmethod
    def looking_at(
        cls,
        eye: Vector3D,
        target: Vector3D,
        up: Optional[Vector3D] = None
    ) -> Optional[Quaternion]:
        """
        Rotation that makes a body at eye face target (local -Z towards it).

        Args:
            eye: Position of the body
            target: Point to face
            up: World up hint (default +Y)

        Returns:
            The rotation, or None when the direction is zero or parallel to up
        """
        if up is None:
            up = Vector3D.unit_y()
        direction = (target - eye).normalized()
        if direction.magnitude_squared == 0:
            return None

        back = -direction
        right = up.cross(back)
        if right.magnitude < EPSILON:
            return None
        right = right.normalized()
        true_up = back.cross(right)
        return cls.from_axes(right, true_up, back)

    def __repr__(self) -> str:
        return f"Quaternion({self.x:.6g}, {self.y:.6g}, {self.z:.6g}, {self.w:.6g})"


# =============================================================================
# VEHICLE POSE
# =============================================================================

@dataclass
class VehiclePose:
    """
    Kinematic state of the controllable vehicle.

    Attributes:
        position: World position
        rotation: Orientation as a unit quaternion
        velocity: Linear velocity in world coordinates (units/s)
    """
    position: Vector3D = field(default_factory=Vector3D.zero)
    rotation: Quaternion = field(default_factory=Quaternion.identity)
    velocity: Vector3D = field(default_factory=Vector3D.zero)

    @property
    def depth(self) -> float:
        """Depth below the surface (negative when above it)."""
        return SURFACE_Y - self.position.y

    @property
    def speed(self) -> float:
        return self.velocity.magnitude

    @property
    def heading(self) -> Vector3D:
        """World-space forward direction."""
        return self.rotation.rotate(Vector3D.forward())

    def euler(self) -> tuple[float, float, float]:
        """(yaw, pitch, roll) in radians."""
        return self.rotation.to_euler_yxz()

    def to_local(self, world_point: Vector3D) -> Vector3D:
        """Express a world point relative to this pose in the local frame."""
        return self.rotation.inverse().rotate(world_point - self.position)

    def copy(self) -> VehiclePose:
        """Create a deep copy of the pose."""
        return VehiclePose(
            position=self.position.copy(),
            rotation=self.rotation.copy(),
            velocity=self.velocity.copy(),
        )

    @classmethod
    def default(cls) -> VehiclePose:
        """Safe pose used when no vehicle exists."""
        return cls()
