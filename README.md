# bspkit

Pure-Python tools for working with classic first-person-shooter game data.
It has no dependencies outside the standard library.

## What is in it

- `bspkit.q3bsp`: `Q3BSPAsset.from_bytes` / `Q3BSPAsset.from_file` load every lump
  of an `IBSP` map (faces, vertices, indices, textures, lightmaps, nodes, leafs,
  planes, brushes, models, light volumes, visibility data). Bezier patch faces are
  tesselated into triangles on load. Malformed data raises `BSPFormatError`.
- `bspkit.q3types`: the record types of the map format (`BSPVertex`, `BSPFace`,
  `BSPPlane`, ...), each with a `from_buffer` class method, and `VisData` with
  `is_cluster_visible`.
- `bspkit.bezier`: `count_bezier_patches` and `tesselate_bezier_patches`.
- `bspkit.lightgrid`: `LightGrid.from_bsp` builds the light grid over the world
  model; `LightGrid.sample` returns a `LightSample` (ambient, colour, direction)
  or `None`.
- `bspkit.collision`: `Q3BspCollision` sweeps an axis-aligned box through the
  solid brushes (`trace` returns a `HitResult`) and finds the cluster and area
  containing a point (`find_cluster_area`).
- `bspkit.movement`: `PlayerMovement`, a movement model with ground detection,
  friction, acceleration, air control, jumping and step/slide collision response;
  `clip_velocity` is exposed on its own.
- `bspkit.actors`: `Player` (mouse look driving a `PlayerMovement`),
  `PlayerDebug` (free flight) and `Monster`, all reading an `InputState`.
- `bspkit.input`: `InputState`, per-frame keyboard and mouse state with press and
  click (release) detection.
- `bspkit.animation`: `Animation`, `Sequence`, `Frame`, `Animator` and
  `ModelInstance` for interpolating bone poses; helpers `quat_from_euler`,
  `quat_to_mat4` and `mat4_mul`.
- `bspkit.mdlfile`: `MDLFile.from_bytes` / `MDLFile.from_file` read a studio model
  header: name, checksum, texture names, texture directories and the body part /
  model / mesh hierarchy.
- `bspkit.sourcetypes`: `parse_header` and `unpack_array` plus record types
  (`Plane`, `Node`, `Leaf`, `Face`, `TexInfo`, `WorldLight`, ...) of the Source
  map format.
- `bspkit.keyvalues`: `KeyValueCollection` parses `{ "key" "value" }` entity
  blocks; `KeyValueEntry.get_int` and `get_vec3` read typed values.
- `bspkit.camera`: `Camera` plus `perspective` and `look_at` matrices.
- `bspkit.debuglines`: `DebugLineList`, timed lines flattened to vertex data.
- `bspkit.vec`: the immutable `Vec3` used everywhere.

## Installation

```
pip install .
```

## Examples

Load a map and trace a player-sized box downwards:

```python
from bspkit.q3bsp import Q3BSPAsset
from bspkit.collision import Q3BspCollision
from bspkit.vec import Vec3

bsp = Q3BSPAsset.from_file("maps/level.bsp")
collision = Q3BspCollision(bsp)

hit = collision.trace(
    Vec3(0, 0, 128), Vec3(0, 0, -128),
    Vec3(-15, -15, -24), Vec3(15, 15, 32),
)
print(hit.fraction, hit.endpos, hit.normal)
```

Find entities in the map's entity string:

```python
from bspkit.keyvalues import KeyValueCollection

entities = KeyValueCollection()
entities.init_from_string(bsp.entities)
for spawn in entities.all_with_key_value("classname", "info_player_deathmatch"):
    print(spawn.get_vec3("origin"))
```

Sample lighting at a point:

```python
from bspkit.lightgrid import LightGrid

grid = LightGrid.from_bsp(bsp)
sample = grid.sample(Vec3(0, 0, 64))
```

Run a frame of player movement:

```python
from bspkit.movement import PlayerMovement

movement = PlayerMovement(collision)
movement.set_transform(Vec3(0, 0, 64), Vec3(1, 0, 0), Vec3(0, -1, 0), Vec3(0, 0, 1))
movement.set_input_movement(1, 0, False)
movement.update(1 / 60)
print(movement.position, movement.is_walking())
```

Read a studio model header:

```python
from bspkit.mdlfile import MDLFile

mdl = MDLFile.from_file("models/props/crate.mdl")
print(mdl.name, mdl.texture_names, [part.name for part in mdl.bodyparts])
```

## What it does not do

- There is no renderer, window or viewer, and no command to run: the package
  produces data (matrices, vertex lists, poses, trace results) for a caller to
  draw or use.
- Textures and images are not loaded or decoded; lightmaps are kept as raw RGB
  bytes.
- There is no reader for animated model files: an `Animation` must be built
  from `Sequence` and `Frame` objects by the caller.
- Source maps are not loaded as a whole; `bspkit.sourcetypes` decodes the
  header and individual lump records only.
- `InputState` does not poll any device; the caller feeds it keys, buttons and
  cursor position each frame.

## Running the tests

```
pip install ".[test]"
pytest
```