"""Append-only scene registry of materials and primitives.

The registry is an explicitly owned object passed to whoever needs it
(serializer, frame driver, presets); there is no global scene. Every
``add_*`` call appends and returns the stable index of the new entry, so
an index captured before a later addition stays valid for the lifetime
of the scene. Scenes are rebuilt, never edited: there is no removal.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Generic, Iterable, TypeVar

from render_core import layout
from render_core.mesh import TriangleMesh
from render_core.primitives import Material, Plane, Quad, Sphere, Triangle

logger = logging.getLogger(__name__)

P = TypeVar("P")


@dataclass(frozen=True)
class Placed(Generic[P]):
    """A primitive tagged with the index of its material."""

    primitive: P
    material_index: int


@dataclass(frozen=True)
class EntityCounts:
    """Live entity counts per record kind.

    The rendering program's compiled-in array sizes must equal these.
    """

    materials: int
    spheres: int
    planes: int
    triangles: int

    def as_dict(self) -> dict[str, int]:
        return {
            "materials": self.materials,
            "spheres": self.spheres,
            "planes": self.planes,
            "triangles": self.triangles,
        }


class SceneRegistry:
    """Ordered, index-stable collections of materials and primitives.

    Attributes
    ----------
    revision : int
        Incremented on every successful addition; consumers compare it
        with the revision they last serialized to detect changes.
    """

    def __init__(self) -> None:
        self._materials: list[Material] = []
        self._spheres: list[Placed[Sphere]] = []
        self._planes: list[Placed[Plane]] = []
        self._triangles: list[Placed[Triangle]] = []
        self.revision = 0

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def materials(self) -> tuple[Material, ...]:
        return tuple(self._materials)

    @property
    def spheres(self) -> tuple[Placed[Sphere], ...]:
        return tuple(self._spheres)

    @property
    def planes(self) -> tuple[Placed[Plane], ...]:
        return tuple(self._planes)

    @property
    def triangles(self) -> tuple[Placed[Triangle], ...]:
        return tuple(self._triangles)

    def material(self, index: int) -> Material:
        """Look up a material by index.

        Raises
        ------
        IndexError
            If no material has this index.
        """
        if not (0 <= index < len(self._materials)):
            raise IndexError(
                f"No material with index {index} (registry holds {len(self._materials)})"
            )
        return self._materials[index]

    def counts(self) -> EntityCounts:
        return EntityCounts(
            materials=len(self._materials),
            spheres=len(self._spheres),
            planes=len(self._planes),
            triangles=len(self._triangles),
        )

    # ------------------------------------------------------------------
    # Append API
    # ------------------------------------------------------------------

    def add_material(self, material: Material) -> int:
        self._materials.append(material)
        self.revision += 1
        return len(self._materials) - 1

    def add_sphere(self, sphere: Sphere, material_index: int) -> int:
        self._spheres.append(Placed(sphere, self._checked(material_index)))
        self.revision += 1
        return len(self._spheres) - 1

    def add_plane(self, plane: Plane, material_index: int) -> int:
        self._planes.append(Placed(plane, self._checked(material_index)))
        self.revision += 1
        return len(self._planes) - 1

    def add_triangle(self, triangle: Triangle, material_index: int) -> int:
        self._triangles.append(Placed(triangle, self._checked(material_index)))
        self.revision += 1
        return len(self._triangles) - 1

    def add_quad(self, quad: Quad, material_index: int) -> tuple[int, int]:
        """Add both halves of a quad; returns their triangle indices."""
        material_index = self._checked(material_index)
        return (
            self.add_triangle(quad.t1, material_index),
            self.add_triangle(quad.t2, material_index),
        )

    def add_mesh(
        self,
        mesh: TriangleMesh | Iterable[Triangle],
        material_index: int,
    ) -> range:
        """Add every triangle of a mesh with one material.

        Parameters
        ----------
        mesh : TriangleMesh or iterable of Triangle
            Fully loaded mesh; partial meshes are never registered.
        material_index : int
            Material applied to all triangles.

        Returns
        -------
        range
            Triangle indices of the added triangles (empty for an empty mesh).
        """
        material_index = self._checked(material_index)
        if isinstance(mesh, TriangleMesh):
            name = mesh.name
            triangles = mesh.to_triangles()
        else:
            name = type(mesh).__name__
            triangles = list(mesh)

        start = len(self._triangles)
        if not triangles:
            logger.warning("Mesh '%s' has no triangles; nothing added", name)
            return range(start, start)

        for tri in triangles:
            self.add_triangle(tri, material_index)

        logger.info(
            "Added mesh '%s': %d triangles with material %d",
            name,
            len(triangles),
            material_index,
        )
        return range(start, len(self._triangles))

    def _checked(self, material_index: int) -> int:
        material_index = layout.check_index(material_index)
        if not (0 <= material_index < len(self._materials)):
            raise IndexError(
                f"Unknown material index {material_index} "
                f"(registry holds {len(self._materials)} materials)"
            )
        return material_index

    def __repr__(self) -> str:
        c = self.counts()
        return (
            f"SceneRegistry(materials={c.materials}, spheres={c.spheres}, "
            f"planes={c.planes}, triangles={c.triangles})"
        )
